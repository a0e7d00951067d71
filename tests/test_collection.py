import numpy as np
import pytest

from hitgeom.physics.collection import HitCollection
from hitgeom.physics.errors import IndexOutOfRange
from hitgeom.physics.hits import Hit, HitType


def _coll():
    c = HitCollection()
    c.add_hit([1, 2, 3], 10.0, 0.5, HitType.XYZ)
    c.add_hit([4, 0, 6], 20.0, 1.5, "xz")
    return c

def test_accessors_follow_insertion_order():
    c = _coll()
    assert c.count() == len(c) == 2
    np.testing.assert_array_equal(c.position(0), [1, 2, 3])
    assert c.energy(1) == 20.0
    assert c.time(1) == 1.5
    assert c.type(1) is HitType.XZ
    assert c.get(0).z == 3.0

@pytest.mark.parametrize("idx", [2, 5, -1])
def test_bad_index_raises(idx):
    c = _coll()
    with pytest.raises(IndexOutOfRange):
        c.get(idx)
    with pytest.raises(IndexError):
        c.energy(idx)

def test_swap_and_remove_all():
    c = _coll()
    c.swap(0, 1)
    assert c.energy(0) == 20.0 and c.energy(1) == 10.0
    with pytest.raises(IndexOutOfRange):
        c.swap(0, 2)
    c.remove_all()
    assert c.count() == 0
    assert c.positions().shape == (0, 3)

def test_sort_key_or_less_predicate():
    c = HitCollection()
    for e in (3.0, 1.0, 2.0):
        c.add_hit([0, 0, 0], e)
    c.sort(key=lambda h: h.energy)
    assert [h.energy for h in c] == [1.0, 2.0, 3.0]
    c.sort(less=lambda a, b: a.energy > b.energy)
    assert [h.energy for h in c] == [3.0, 2.0, 1.0]
    with pytest.raises(ValueError):
        c.sort()

def test_hit_type_capabilities():
    assert HitType.XZ == HitType.X | HitType.Z
    assert HitType.XZ.has_x and HitType.XZ.has_z and not HitType.XZ.has_y
    assert HitType.XYZ.covers(HitType.XZ)
    assert not HitType.XZ.covers(HitType.XY)
    assert HitType.parse("yz") is HitType.YZ
    with pytest.raises(ValueError):
        HitType.parse("W")

def test_hit_normalises_inputs():
    h = Hit([1, 2, 3], 5, type="XY")
    assert h.position.dtype == np.float64
    assert h.type is HitType.XY
    assert h.time == 0.0
    assert h.same_as(h.copy())

def test_negative_energy_rejected():
    with pytest.raises(ValueError):
        Hit([0, 0, 0], -10.0)
    c = HitCollection()
    with pytest.raises(ValueError):
        c.add_hit([0, 0, 0], -1.0)
    assert c.count() == 0
