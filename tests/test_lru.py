import pytest

from corekv.cache.lru import SegmentedLRU, Stage, StoreItem, WindowLRU


def items(*keys):
    return [StoreItem(key=k, value=f"v{k}") for k in keys]


def test_window_evicts_least_recent():
    data = {}
    window = WindowLRU(2, data)
    a, b, c, d = items(1, 2, 3, 4)
    assert window.add(a) is None
    assert window.add(b) is None
    assert window.add(c) is a
    assert set(data) == {b.key, c.key}
    window.get(b)
    assert window.add(d) is c
    assert set(data) == {b.key, d.key}
    assert len(window) == 2


def test_window_items_are_in_window_stage():
    window = WindowLRU(1, {})
    (a,) = items(1)
    a.stage = Stage.PROTECTED
    window.add(a)
    assert a.stage == Stage.WINDOW


def test_window_requires_capacity():
    with pytest.raises(ValueError):
        WindowLRU(0, {})


def test_segmented_promotion_and_victim():
    data = {}
    slru = SegmentedLRU(data, 1, 1)
    x, y, z = items(1, 2, 3)
    slru.add(x)
    assert x.stage == Stage.PROBATION
    assert slru.victim() is None
    slru.add(y)
    assert slru.victim() is x
    slru.get(x)
    assert x.stage == Stage.PROTECTED
    assert slru.victim() is y
    assert len(slru) == 2

    slru.add(z)
    assert set(data) == {x.key, z.key}
    slru.get(z)
    assert z.stage == Stage.PROTECTED
    assert x.stage == Stage.PROBATION
    assert slru.victim() is x
    assert len(slru) == 2


def test_segmented_remove():
    data = {}
    slru = SegmentedLRU(data, 2, 2)
    a, b = items(1, 2)
    slru.add(a)
    slru.add(b)
    slru.get(a)
    slru.remove(a)
    slru.remove(b)
    assert len(slru) == 0


def test_segmented_without_protected_segment():
    slru = SegmentedLRU({}, 1, 0)
    (a,) = items(1)
    slru.add(a)
    slru.get(a)
    assert a.stage == Stage.PROBATION
    assert slru.victim() is a


def test_segmented_rejects_bad_capacities():
    with pytest.raises(ValueError):
        SegmentedLRU({}, 0, 1)