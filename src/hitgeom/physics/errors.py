from __future__ import annotations


class IndexOutOfRange(IndexError):
    """Hit index outside ``[0, count())``."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Hit index {index} out of range for collection of {count} hits")
        self.index = index
        self.count = count


class EmptyResultUndefined(ValueError):
    """An aggregate was requested over zero hits."""
