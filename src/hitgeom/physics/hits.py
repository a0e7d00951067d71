from __future__ import annotations
from dataclasses import dataclass
from enum import Flag

import numpy as np


class HitType(Flag):
    """
    Coordinate-validity tag: which of x/y/z were physically measured.

    Combined tags are unions of the single-axis members, so
    ``HitType.XZ == HitType.X | HitType.Z``.
    """
    X = 1
    Y = 2
    Z = 4
    XY = X | Y
    XZ = X | Z
    YZ = Y | Z
    XYZ = X | Y | Z

    @property
    def has_x(self) -> bool:
        return HitType.X in self

    @property
    def has_y(self) -> bool:
        return HitType.Y in self

    @property
    def has_z(self) -> bool:
        return HitType.Z in self

    def covers(self, other: "HitType") -> bool:
        """True if every axis measured by ``other`` is also measured here."""
        return (self & other) == other

    @classmethod
    def parse(cls, value: "HitType | str") -> "HitType":
        if isinstance(value, HitType):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown hit type {value!r}; expected one of X, Y, Z, XY, XZ, YZ, XYZ") from None


AXES = (HitType.X, HitType.Y, HitType.Z)


@dataclass(slots=True)
class Hit:
    """
    Single energy deposit.

    position: (x, y, z) [mm]; unmeasured coordinates hold a placeholder
    energy: deposited energy [keV]
    time: delay [us], 0 when unset
    type: which coordinates of ``position`` are valid
    """
    position: np.ndarray  # shape (3,), dtype float
    energy: float
    time: float = 0.0
    type: HitType = HitType.XYZ

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)
        self.energy = float(self.energy)
        if self.energy < 0:
            raise ValueError(f"Hit energy must be non-negative, got {self.energy}")
        self.time = float(self.time)
        self.type = HitType.parse(self.type)

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])

    def copy(self) -> "Hit":
        return Hit(self.position.copy(), self.energy, self.time, self.type)

    def same_as(self, other: "Hit") -> bool:
        return (
            self.type == other.type
            and self.energy == other.energy
            and self.time == other.time
            and bool(np.array_equal(self.position, other.position))
        )
