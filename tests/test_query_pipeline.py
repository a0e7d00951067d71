import math

import pytest
from pydantic import ValidationError

from hitgeom.config.load import load_config, loads_config
from hitgeom.config.schemas import Config, CylinderCfg, PrismCfg
from hitgeom.pipelines.query import run_queries

TOML = """
[run]
diagnostics_level = 0
seed = 11
shuffle_iterations = 5

[[volumes]]
shape = "cylinder"
name = "core"
x0 = [0, 0, -1]
x1 = [0, 0, 11]
radius = 1.0

[[volumes]]
shape = "cylinder"
name = "offaxis"
x0 = [3, 3, -1]
x1 = [3, 3, 11]
radius = 0.5

[[volumes]]
shape = "prism"
name = "box"
x0 = [0, 0, -1]
x1 = [0, 0, 11]
size_x = 4
size_y = 4

[[hits]]
position = [0, 0, 0]
energy = 1.0

[[hits]]
position = [0, 0, 5]
energy = 2.0

[[hits]]
position = [0, 0, 10]
energy = 3.0
"""

def test_config_parses_volume_union():
    cfg = loads_config(TOML)
    assert isinstance(cfg.volumes[0], CylinderCfg)
    assert isinstance(cfg.volumes[2], PrismCfg)
    assert cfg.hits[1].type == "XYZ"

def test_run_queries_from_file(tmp_path):
    p = tmp_path / "query.toml"
    p.write_text(TOML)
    assert load_config(p).run.seed == 11
    rep = run_queries(p)
    assert rep["n_hits"] == 3
    assert rep["total_energy"] == pytest.approx(6.0)
    assert rep["extent"] == (0.0, 0.0, 0.0, 0.0, 0.0, 10.0)
    core = rep["volumes"]["core"]
    assert core["count"] == 3 and core["all"] and core["energy"] == pytest.approx(6.0)
    assert core["mean_position"] == pytest.approx([0, 0, 5])
    off = rep["volumes"]["offaxis"]
    assert off["count"] == 0 and off["wall"] == -1
    assert all(math.isnan(x) for x in off["mean_position"])
    assert rep["volumes"]["box"]["wall"] == pytest.approx(2.0)

def test_invalid_configs_rejected():
    with pytest.raises(ValidationError):
        Config(run={"diagnostics_level": 5})
    with pytest.raises(ValidationError):
        Config(volumes=[{"shape": "cylinder", "x0": [0, 0], "x1": [0, 0, 1], "radius": 1}])
    with pytest.raises(ValidationError):
        Config(volumes=[{"shape": "cylinder", "x0": [0, 0, 0], "x1": [0, 0, 1], "radius": -1}])
    with pytest.raises(ValidationError):
        Config(hits=[{"position": [0, 0, 0], "energy": 1, "type": "Q"}])
    dup = {"shape": "prism", "name": "p", "x0": [0, 0, 0], "x1": [0, 0, 1], "size_x": 1, "size_y": 1}
    with pytest.raises(ValidationError):
        Config(volumes=[dup, dup])
