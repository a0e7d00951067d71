from __future__ import annotations
from functools import cmp_to_key
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

import numpy as np

from .errors import IndexOutOfRange
from .hits import Hit, HitType

HitKey = Callable[[Hit], object]
HitLess = Callable[[Hit, Hit], bool]


class HitCollection:
    """
    Ordered, mutable sequence of hits.

    Insertion order is the index used by every accessor. The collection has
    no geometry logic of its own; see ``hitgeom.geometry.engine``.
    ``total_energy`` is a cache written by
    ``HitGeometryEngine.total_deposited_energy`` and is not kept in sync
    with later mutation.
    """

    def __init__(self, hits: Optional[Iterable[Hit]] = None):
        self._hits: List[Hit] = list(hits) if hits is not None else []
        self.total_energy: float = 0.0

    # --- mutation -------------------------------------------------------------

    def add_hit(
        self,
        position: Sequence[float] | np.ndarray,
        energy: float,
        time: float = 0.0,
        type: HitType | str = HitType.XYZ,
    ) -> Hit:
        hit = Hit(position, energy, time, type)
        self._hits.append(hit)
        return hit

    def append(self, hit: Hit) -> None:
        self._hits.append(hit)

    def remove_all(self) -> None:
        self._hits.clear()

    def swap(self, i: int, j: int) -> None:
        self._check(i)
        self._check(j)
        self._hits[i], self._hits[j] = self._hits[j], self._hits[i]

    def sort(self, key: Optional[HitKey] = None, less: Optional[HitLess] = None) -> None:
        """
        In-place sort by ``key`` or by a strict less-than predicate ``less``.
        Exactly one of the two must be given.
        """
        if (key is None) == (less is None):
            raise ValueError("sort() needs exactly one of key= or less=")
        if less is not None:
            def _cmp(a: Hit, b: Hit) -> int:
                if less(a, b):
                    return -1
                if less(b, a):
                    return 1
                return 0
            key = cmp_to_key(_cmp)
        self._hits.sort(key=key)

    # --- access ---------------------------------------------------------------

    def _check(self, index: int) -> None:
        if not isinstance(index, (int, np.integer)) or not 0 <= index < len(self._hits):
            raise IndexOutOfRange(index, len(self._hits))

    def count(self) -> int:
        return len(self._hits)

    def get(self, index: int) -> Hit:
        self._check(index)
        return self._hits[index]

    def position(self, index: int) -> np.ndarray:
        return self.get(index).position

    def energy(self, index: int) -> float:
        return self.get(index).energy

    def time(self, index: int) -> float:
        return self.get(index).time

    def type(self, index: int) -> HitType:
        return self.get(index).type

    def positions(self) -> np.ndarray:
        """(n, 3) float64 array of positions, source order."""
        if not self._hits:
            return np.zeros((0, 3), dtype=np.float64)
        return np.stack([h.position for h in self._hits], axis=0)

    def energies(self) -> np.ndarray:
        return np.array([h.energy for h in self._hits], dtype=np.float64)

    def types(self) -> List[HitType]:
        return [h.type for h in self._hits]

    def __len__(self) -> int:
        return len(self._hits)

    def __iter__(self) -> Iterator[Hit]:
        return iter(self._hits)

    def __getitem__(self, index: int) -> Hit:
        return self.get(index)

    def __repr__(self) -> str:
        return f"HitCollection(n={len(self._hits)})"
