from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol, Union

import numpy as np


def _vec3(v) -> np.ndarray:
    a = np.asarray(v, dtype=np.float64)
    if a.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {a.shape}")
    return a


def _axis(x0: np.ndarray, x1: np.ndarray) -> tuple[np.ndarray, float]:
    axis = x1 - x0
    length = float(np.linalg.norm(axis))
    if length == 0:
        raise ValueError("Zero-length vector")
    return axis, length


class Volume(Protocol):
    """
    Closed volume built on the segment x0 -> x1.

    Implementations work on (n, 3) point arrays and return per-point arrays,
    so the engine can aggregate with numpy in one pass.
    """
    x0: np.ndarray
    x1: np.ndarray
    length: float

    def axial_offsets(self, points: np.ndarray) -> np.ndarray:
        """Signed distance of each point along the axis, measured from x0."""

    def contains(self, points: np.ndarray) -> np.ndarray:
        """Boolean mask of points inside the volume."""

    def wall_distances(self, points: np.ndarray) -> np.ndarray:
        """Per-point wall quantity, meaningful for contained points only."""

    def finish_wall_distance(self, d_min: float) -> float:
        """Map the minimum per-point wall quantity to the reported distance."""


@dataclass
class Cylinder:
    """
    Right circular cylinder from base centre ``x0`` to top centre ``x1``.

    A point is inside when its axial offset lies in [0, length] and its
    squared perpendicular distance from the axis is at most radius**2.
    """
    x0: np.ndarray
    x1: np.ndarray
    radius: float
    axis: np.ndarray = field(init=False, repr=False)
    length: float = field(init=False)

    def __post_init__(self) -> None:
        self.x0 = _vec3(self.x0)
        self.x1 = _vec3(self.x1)
        self.radius = float(self.radius)
        if not self.radius > 0:
            raise ValueError(f"Cylinder radius must be positive, got {self.radius}")
        self.axis, self.length = _axis(self.x0, self.x1)

    @classmethod
    def from_cfg(cls, x0, x1, radius) -> "Cylinder":
        return cls(np.asarray(x0, dtype=np.float64), np.asarray(x1, dtype=np.float64), radius)

    def axial_offsets(self, points: np.ndarray) -> np.ndarray:
        return ((points - self.x0) @ self.axis) / self.length

    def _perp2(self, points: np.ndarray, l: np.ndarray) -> np.ndarray:
        d = points - self.x0
        return np.einsum("ij,ij->i", d, d) - l * l

    def contains(self, points: np.ndarray) -> np.ndarray:
        l = self.axial_offsets(points)
        return (l >= 0.0) & (l <= self.length) & (self._perp2(points, l) <= self.radius ** 2)

    def wall_distances(self, points: np.ndarray) -> np.ndarray:
        # r^2 - |p - x0|^2 + l^2, square-rooted once after the minimum is taken
        l = self.axial_offsets(points)
        d = points - self.x0
        return self.radius ** 2 - np.einsum("ij,ij->i", d, d) + l * l

    def finish_wall_distance(self, d_min: float) -> float:
        return float(np.sqrt(max(d_min, 0.0)))


@dataclass
class Prism:
    """
    Rectangular prism from base centre ``x0`` to top centre ``x1``.

    The face offsets of a point, ``p - x0``, are rotated about z by
    ``theta`` [rad] and the local x/y are compared against the half-widths
    ``size_x/2`` and ``size_y/2``; the height bound matches the cylinder's.
    """
    x0: np.ndarray
    x1: np.ndarray
    size_x: float
    size_y: float
    theta: float = 0.0
    axis: np.ndarray = field(init=False, repr=False)
    length: float = field(init=False)

    def __post_init__(self) -> None:
        self.x0 = _vec3(self.x0)
        self.x1 = _vec3(self.x1)
        self.size_x = float(self.size_x)
        self.size_y = float(self.size_y)
        self.theta = float(self.theta)
        if not (self.size_x > 0 and self.size_y > 0):
            raise ValueError(f"Prism sizes must be positive, got ({self.size_x}, {self.size_y})")
        self.axis, self.length = _axis(self.x0, self.x1)

    @classmethod
    def from_cfg(cls, x0, x1, size_x, size_y, theta=0.0) -> "Prism":
        return cls(np.asarray(x0, dtype=np.float64), np.asarray(x1, dtype=np.float64),
                   size_x, size_y, theta)

    @property
    def half_x(self) -> float:
        return 0.5 * self.size_x

    @property
    def half_y(self) -> float:
        return 0.5 * self.size_y

    def axial_offsets(self, points: np.ndarray) -> np.ndarray:
        return ((points - self.x0) @ self.axis) / self.length

    def local_xy(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        d = points - self.x0
        c, s = np.cos(self.theta), np.sin(self.theta)
        return c * d[:, 0] - s * d[:, 1], s * d[:, 0] + c * d[:, 1]

    def contains(self, points: np.ndarray) -> np.ndarray:
        l = self.axial_offsets(points)
        u, v = self.local_xy(points)
        return ((l >= 0.0) & (l <= self.length)
                & (np.abs(u) <= self.half_x) & (np.abs(v) <= self.half_y))

    def wall_distances(self, points: np.ndarray) -> np.ndarray:
        u, v = self.local_xy(points)
        return np.minimum(self.half_x - np.abs(u), self.half_y - np.abs(v))

    def finish_wall_distance(self, d_min: float) -> float:
        return float(d_min)


AnyVolume = Union[Cylinder, Prism]


def make_volume(cfg) -> AnyVolume:
    """
    Small factory used by the query pipeline; accepts a ``CylinderCfg`` /
    ``PrismCfg`` model or an equivalent dict.

      shape = "cylinder": x0, x1, radius
      shape = "prism":    x0, x1, size_x, size_y, theta (rad, optional)
    """
    d = cfg.model_dump() if hasattr(cfg, "model_dump") else dict(cfg)
    shape = str(d.get("shape", "")).lower()
    if shape == "cylinder":
        return Cylinder.from_cfg(d["x0"], d["x1"], d["radius"])
    if shape == "prism":
        return Prism.from_cfg(d["x0"], d["x1"], d["size_x"], d["size_y"], d.get("theta", 0.0))
    raise ValueError(f"Unknown volume shape={d.get('shape')!r}")
