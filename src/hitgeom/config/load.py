from __future__ import annotations
from .schemas import Config
from pathlib import Path

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # py<=310

def load_config(path: str | Path) -> Config:
    """Read a query TOML file (run controls, volumes, optional hits) into a Config."""
    p = Path(path)
    data = tomllib.loads(p.read_text())
    return Config(**data)

def loads_config(text: str) -> Config:
    """Parse TOML text directly (handy for tests and embedded configs)."""
    return Config(**tomllib.loads(text))
