from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..physics.collection import HitCollection, HitKey, HitLess
from ..physics.errors import EmptyResultUndefined
from ..physics.hits import AXES, HitType
from .volumes import Volume

logger = logging.getLogger(__name__)

# Returned by the distance queries when no hit lies inside the volume.
NO_HITS_INSIDE = -1.0

_AXIS_INDEX = {HitType.X: 0, HitType.Y: 1, HitType.Z: 2}
_PLANE_AXES = {
    HitType.XY: (HitType.X, HitType.Y),
    HitType.XZ: (HitType.X, HitType.Z),
    HitType.YZ: (HitType.Y, HitType.Z),
}


@dataclass(frozen=True)
class Extent:
    """Axis-aligned bounding box of a collection [mm]; NaN on an axis with no measured hits."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float

    def as_tuple(self) -> tuple[float, float, float, float, float, float]:
        return (self.min_x, self.max_x, self.min_y, self.max_y, self.min_z, self.max_z)

    @property
    def is_empty(self) -> bool:
        return bool(np.all(np.isnan(self.as_tuple())))


def extract_projection(collection: HitCollection, target: HitType | str) -> HitCollection:
    """
    New collection holding copies of the hits whose tag equals ``target``
    exactly, in source order.
    """
    target = HitType.parse(target)
    out = HitCollection()
    for hit in collection:
        if hit.type == target:
            out.append(hit.copy())
    return out


def _coverage_mask(collection: HitCollection, tag: HitType) -> np.ndarray:
    return np.array([t.covers(tag) for t in collection.types()], dtype=bool)


class HitGeometryEngine:
    """
    Stateless geometric queries over a borrowed ``HitCollection``.

    The only state is the trio of derived projections (``xz_hits``,
    ``yz_hits``, ``xyz_hits``), which are rebuilt from scratch and replace
    the previous contents every time they are requested.
    """

    def __init__(self):
        self.xz_hits = HitCollection()
        self.yz_hits = HitCollection()
        self.xyz_hits = HitCollection()

    # --- projections ----------------------------------------------------------

    def get_xz_hits(self, collection: HitCollection) -> HitCollection:
        self.xz_hits = extract_projection(collection, HitType.XZ)
        return self.xz_hits

    def get_yz_hits(self, collection: HitCollection) -> HitCollection:
        self.yz_hits = extract_projection(collection, HitType.YZ)
        return self.yz_hits

    def get_xyz_hits(self, collection: HitCollection) -> HitCollection:
        self.xyz_hits = extract_projection(collection, HitType.XYZ)
        return self.xyz_hits

    def reset_projections(self) -> None:
        self.xz_hits = HitCollection()
        self.yz_hits = HitCollection()
        self.xyz_hits = HitCollection()

    def plane_view(self, collection: HitCollection, plane: HitType | str) -> np.ndarray:
        """
        (n, 2) array with the two in-plane coordinates of every hit that
        measures both axes of ``plane`` (XY, XZ or YZ).
        """
        plane = HitType.parse(plane)
        if plane not in _PLANE_AXES:
            raise ValueError(f"plane must be XY, XZ or YZ, got {plane.name}")
        a, b = _PLANE_AXES[plane]
        mask = _coverage_mask(collection, plane)
        pts = collection.positions()[mask]
        return pts[:, [_AXIS_INDEX[a], _AXIS_INDEX[b]]]

    def axis_view(self, collection: HitCollection, axis: HitType | str) -> np.ndarray:
        axis = HitType.parse(axis)
        if axis not in _AXIS_INDEX:
            raise ValueError(f"axis must be X, Y or Z, got {axis.name}")
        mask = _coverage_mask(collection, axis)
        return collection.positions()[mask, _AXIS_INDEX[axis]]

    # --- ordering -------------------------------------------------------------

    def sort_by(self, collection: HitCollection, key: Optional[HitKey] = None,
                less: Optional[HitLess] = None) -> None:
        """
        Reorder in place. Without ``key``/``less`` hits go by ascending z;
        a supplied ordering replaces that default entirely.
        """
        if key is None and less is None:
            key = lambda h: h.position[2]
        collection.sort(key=key, less=less)

    def shuffle(self, collection: HitCollection, iterations: int, rng: np.random.Generator) -> None:
        """
        Perform ``iterations`` random pairwise swaps, both indices drawn
        uniformly from [0, count()).

        This is only an approximate randomisation: for small ``iterations``
        the resulting permutation is not uniform. Callers that need a
        uniform shuffle must choose ``iterations`` large compared to the
        number of hits. Does nothing for fewer than two hits.
        """
        n = collection.count()
        if n < 2:
            return
        for _ in range(int(iterations)):
            i = int(n * rng.uniform(0.0, 1.0))
            j = int(n * rng.uniform(0.0, 1.0))
            # random.Random.uniform may return the upper bound itself
            collection.swap(min(i, n - 1), min(j, n - 1))

    # --- containment ----------------------------------------------------------

    def inside_mask(self, collection: HitCollection, volume: Volume) -> np.ndarray:
        if collection.count() == 0:
            return np.zeros(0, dtype=bool)
        return volume.contains(collection.positions())

    def count_inside(self, collection: HitCollection, volume: Volume) -> int:
        return int(np.count_nonzero(self.inside_mask(collection, volume)))

    def any_inside(self, collection: HitCollection, volume: Volume) -> bool:
        return self.count_inside(collection, volume) > 0

    def all_inside(self, collection: HitCollection, volume: Volume) -> bool:
        # vacuously true for an empty collection
        return self.count_inside(collection, volume) == collection.count()

    def total_energy_inside(self, collection: HitCollection, volume: Volume) -> float:
        mask = self.inside_mask(collection, volume)
        return float(collection.energies()[mask].sum()) if mask.size else 0.0

    def mean_position_inside(self, collection: HitCollection, volume: Volume,
                             strict: bool = False) -> np.ndarray:
        """
        Arithmetic mean position of the contained hits.

        Returns a NaN 3-vector when no hit is inside, or raises
        ``EmptyResultUndefined`` if ``strict``.
        """
        mask = self.inside_mask(collection, volume)
        if not mask.any():
            if strict:
                raise EmptyResultUndefined("No hits inside volume; mean position undefined")
            return np.full(3, np.nan)
        return collection.positions()[mask].mean(axis=0)

    # --- boundary distances ---------------------------------------------------

    def _min_over_inside(self, collection: HitCollection, volume: Volume, values) -> Optional[float]:
        mask = self.inside_mask(collection, volume)
        if not mask.any():
            return None
        pts = collection.positions()[mask]
        return float(np.min(values(pts)))

    def distance_to_wall(self, collection: HitCollection, volume: Volume) -> float:
        """
        Smallest wall quantity over contained hits, or ``NO_HITS_INSIDE``.

        Cylinder: sqrt(min(r^2 - |p - x0|^2 + l^2)).
        Prism: min(size_x/2 - |u|, size_y/2 - |v|) in the rotated face frame.
        """
        d = self._min_over_inside(collection, volume, volume.wall_distances)
        if d is None:
            logger.debug("distance_to_wall: no hits inside %r", volume)
            return NO_HITS_INSIDE
        return volume.finish_wall_distance(d)

    def distance_to_top(self, collection: HitCollection, volume: Volume) -> float:
        d = self._min_over_inside(collection, volume,
                                  lambda pts: volume.length - volume.axial_offsets(pts))
        return NO_HITS_INSIDE if d is None else d

    def distance_to_bottom(self, collection: HitCollection, volume: Volume) -> float:
        d = self._min_over_inside(collection, volume, volume.axial_offsets)
        return NO_HITS_INSIDE if d is None else d

    # --- aggregates -----------------------------------------------------------

    def total_deposited_energy(self, collection: HitCollection) -> float:
        """Sum of all energies; also stored on ``collection.total_energy``."""
        total = float(collection.energies().sum())
        collection.total_energy = total
        return total

    def extent(self, collection: HitCollection, strict: bool = False) -> Extent:
        """
        Per-axis min/max over the hits that measure that axis.

        An empty collection yields an all-NaN ``Extent`` (``is_empty``), or
        raises ``EmptyResultUndefined`` if ``strict``.
        """
        if collection.count() == 0 and strict:
            raise EmptyResultUndefined("Extent of an empty collection is undefined")
        pts = collection.positions()
        bounds = []
        for axis in AXES:
            mask = _coverage_mask(collection, axis)
            col = pts[mask, _AXIS_INDEX[axis]]
            if col.size == 0:
                bounds += [np.nan, np.nan]
            else:
                bounds += [float(col.min()), float(col.max())]
        return Extent(*bounds)

    def count_with(self, collection: HitCollection, axis: HitType | str) -> int:
        axis = HitType.parse(axis)
        return int(np.count_nonzero(_coverage_mask(collection, axis)))

    def energy_with(self, collection: HitCollection, axis: HitType | str) -> float:
        axis = HitType.parse(axis)
        mask = _coverage_mask(collection, axis)
        return float(collection.energies()[mask].sum()) if mask.size else 0.0

    def mean_position(self, collection: HitCollection) -> np.ndarray:
        """Energy-weighted mean per axis over hits measuring that axis (NaN if none)."""
        pts = collection.positions()
        e = collection.energies()
        out = np.full(3, np.nan)
        for axis in AXES:
            mask = _coverage_mask(collection, axis)
            w = e[mask].sum() if mask.size else 0.0
            if w > 0:
                k = _AXIS_INDEX[axis]
                out[k] = float((pts[mask, k] * e[mask]).sum() / w)
        return out
