from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from ..geometry.engine import Extent, HitGeometryEngine
from .collection import HitCollection
from .hits import HitType


@dataclass
class HitsEvent:
    """
    One readout event: a hit collection plus the engine that owns its
    derived XZ/YZ/XYZ projections.

    The boundary fields (``min_x`` .. ``max_z``) are a snapshot; they only
    change when ``set_boundaries()`` or ``initialize()`` is called.
    """
    event_id: int = 0
    hits: HitCollection = field(default_factory=HitCollection)
    engine: HitGeometryEngine = field(default_factory=HitGeometryEngine)
    meta: Dict[str, Any] = field(default_factory=dict)

    min_x: float = 0.0
    max_x: float = 0.0
    min_y: float = 0.0
    max_y: float = 0.0
    min_z: float = 0.0
    max_z: float = 0.0

    def initialize(self) -> None:
        """Drop every hit, reset the projections and zero the boundaries."""
        self.hits.remove_all()
        self.hits.total_energy = 0.0
        self.engine.reset_projections()
        self.min_x = self.max_x = 0.0
        self.min_y = self.max_y = 0.0
        self.min_z = self.max_z = 0.0

    def add_hit(self, position, energy: float, time: float = 0.0,
                type: HitType | str = HitType.XYZ) -> None:
        self.hits.add_hit(position, energy, time, type)

    @property
    def n_hits(self) -> int:
        return self.hits.count()

    def set_boundaries(self) -> Extent:
        ext = self.engine.extent(self.hits)
        (self.min_x, self.max_x, self.min_y, self.max_y,
         self.min_z, self.max_z) = ext.as_tuple()
        return ext

    @property
    def boundaries(self) -> Extent:
        return Extent(self.min_x, self.max_x, self.min_y, self.max_y, self.min_z, self.max_z)

    def xz_hits(self) -> HitCollection:
        return self.engine.get_xz_hits(self.hits)

    def yz_hits(self) -> HitCollection:
        return self.engine.get_yz_hits(self.hits)

    def xyz_hits(self) -> HitCollection:
        return self.engine.get_xyz_hits(self.hits)

    def sort(self, key=None, less=None) -> None:
        self.engine.sort_by(self.hits, key=key, less=less)

    def shuffle(self, iterations: int, rng: np.random.Generator) -> None:
        self.engine.shuffle(self.hits, iterations, rng)

    def total_deposited_energy(self) -> float:
        return self.engine.total_deposited_energy(self.hits)

    def summary(self, n_hits: Optional[int] = None) -> Dict[str, Any]:
        """
        Plain-dict snapshot for printing collaborators. ``n_hits`` limits
        the per-hit rows (None = all).
        """
        rows = []
        for i, h in enumerate(self.hits):
            if n_hits is not None and i >= n_hits:
                break
            rows.append({
                "x": h.x, "y": h.y, "z": h.z,
                "energy": h.energy, "time": h.time, "type": h.type.name,
            })
        return {
            "event_id": self.event_id,
            "n_hits": self.n_hits,
            "total_energy": self.total_deposited_energy(),
            "mean_position": self.engine.mean_position(self.hits).tolist(),
            "hits": rows,
        }
