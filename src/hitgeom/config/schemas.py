from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Annotated, List, Literal, Optional, Union

from hitgeom.physics.hits import HitType


# (x, y, z) [mm]
Vec3 = Annotated[List[float], Field(min_length=3, max_length=3)]


class RunCfg(BaseModel):
    """
    Global run controls.

    TOML:

    [run]
    diagnostics_level  = 1      # 0=off, 1=minimal, 2=verbose
    seed               = 1234   # seeds the shuffle generator
    shuffle_iterations = 0
    sort               = false  # sort by ascending z before querying
    """

    diagnostics_level: int = 1
    seed: Optional[int] = None
    shuffle_iterations: int = Field(default=0, ge=0)
    sort: bool = False

    @field_validator("diagnostics_level")
    def _diag_range(cls, v: int) -> int:
        if v not in (0, 1, 2):
            raise ValueError("diagnostics_level must be 0, 1, or 2")
        return v


class CylinderCfg(BaseModel):
    """
    [[volumes]]
    shape  = "cylinder"
    name   = "drift"
    x0     = [0, 0, -1]   # base centre [mm]
    x1     = [0, 0, 11]   # top centre [mm]
    radius = 1.0
    """

    shape: Literal["cylinder"] = "cylinder"
    name: str = "cylinder"
    x0: Vec3
    x1: Vec3
    radius: float = Field(gt=0)


class PrismCfg(BaseModel):
    shape: Literal["prism"] = "prism"
    name: str = "prism"
    x0: Vec3
    x1: Vec3
    size_x: float = Field(gt=0)
    size_y: float = Field(gt=0)
    theta: float = 0.0  # rad


VolumeCfg = Annotated[Union[CylinderCfg, PrismCfg], Field(discriminator="shape")]


class HitCfg(BaseModel):
    position: Vec3
    energy: float = Field(ge=0)  # keV
    time: float = 0.0  # us
    type: str = "XYZ"

    @field_validator("type")
    def _known_type(cls, v: str) -> str:
        return HitType.parse(v).name


class Config(BaseModel):
    """
    Top-level TOML configuration.
    """

    run: RunCfg = Field(default_factory=RunCfg)
    volumes: List[VolumeCfg] = Field(default_factory=list)
    hits: List[HitCfg] = Field(default_factory=list)

    @field_validator("volumes")
    def _unique_names(cls, v: list) -> list:
        names = [vol.name for vol in v]
        if len(names) != len(set(names)):
            raise ValueError(f"volume names must be unique, got {names}")
        return v
