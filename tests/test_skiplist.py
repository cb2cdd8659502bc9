import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from corekv.entry import Entry, ValueStruct
from corekv.skiplist import Arena, SkipList


def _entry(key, value):
    return Entry(key=key, value=value)


def test_skiplist_basic_crud():
    sl = SkipList(1000)

    entry1 = _entry(b"Key1", b"Val1")
    sl.add(entry1)
    assert sl.search(entry1.key).value == entry1.value

    entry2 = _entry(b"Key2", b"Val2")
    sl.add(entry2)
    assert sl.search(entry2.key).value == entry2.value

    assert sl.search(b"noexist") is None

    entry2_new = _entry(b"Key1", b"Val1+1")
    sl.add(entry2_new)
    assert sl.search(entry2_new.key).value == entry2_new.value


def test_concurrent_basic():
    n = 1000
    sl = SkipList(1000)

    def key(i):
        return f"{i:05d}".encode()

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda i: sl.add(_entry(key(i), key(i))), range(n)))
    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda i: sl.search(key(i)), range(n)))
    assert [r.value for r in results] == [key(i) for i in range(n)]


def test_many_sequential_adds():
    sl = SkipList(1000)
    for i in range(2000):
        key, val = f"Key{i}".encode(), f"Val{i}".encode()
        sl.add(_entry(key, val))
        assert sl.search(key).value == val


def test_iteration_is_sorted():
    keys = [f"k{i:04d}".encode() for i in range(300)] + [b"a", b"a\x00", b"", b"zz"]
    shuffled = keys[:]
    random.Random(7).shuffle(shuffled)
    sl = SkipList(64)
    for key in shuffled:
        sl.add(_entry(key, key + b"!"))
    entries = list(sl)
    assert [e.key for e in entries] == sorted(keys)
    assert all(e.value == e.key + b"!" for e in entries)


def test_update_does_not_duplicate():
    sl = SkipList(100)
    sl.add(_entry(b"same", b"one"))
    sl.add(_entry(b"same", b"two"))
    entries = list(sl)
    assert len(entries) == 1
    assert entries[0].value == b"two"


def test_search_returns_meta_and_expiry():
    sl = SkipList(100)
    sl.add(Entry(key=b"k", value=b"v", meta=2, expires_at=213123123123))
    found = sl.search(b"k")
    assert (found.key, found.value, found.meta, found.expires_at) == (b"k", b"v", 2, 213123123123)


def test_single_level_list_behaves_the_same():
    sl = SkipList(100, max_level=1)
    for key in (b"c", b"a", b"b"):
        sl.add(_entry(key, key))
    assert [e.key for e in sl] == [b"a", b"b", b"c"]
    assert sl.search(b"b").value == b"b"


def test_invalid_max_level_rejected():
    with pytest.raises(ValueError):
        SkipList(100, max_level=0)


def test_size_grows_on_add():
    sl = SkipList(100)
    before = sl.size()
    sl.add(_entry(b"key", b"value"))
    assert sl.size() > before


def test_iterator_seek():
    sl = SkipList(100)
    for key in (b"b", b"d", b"f"):
        sl.add(_entry(key, key))
    it = sl.iterator()
    it.seek(b"c")
    assert it.item().key == b"d"
    it.seek(b"d")
    assert it.item().key == b"d"
    it.seek(b"g")
    assert not it.valid()


def test_iterator_walk_and_invalid_next():
    sl = SkipList(100)
    sl.add(_entry(b"x", b"1"))
    it = sl.iterator()
    assert not it.valid()
    it.rewind()
    assert it.item().value == b"1"
    it.next()
    assert not it.valid()
    with pytest.raises(RuntimeError):
        it.next()
    with pytest.raises(RuntimeError):
        it.item()


def test_arena_starts_at_one_and_allocates_sequentially():
    arena = Arena(16)
    assert arena.size() == 1
    assert arena.allocate(100) == 1
    assert arena.allocate(5) == 101
    assert arena.size() == 106


def test_arena_key_round_trip_after_growth():
    arena = Arena(8)
    key = b"x" * 500
    offset = arena.put_key(key)
    assert arena.get_key(offset, len(key)) == key


def test_arena_value_round_trip():
    arena = Arena(8)
    value = ValueStruct(meta=2, value="硬核课堂".encode(), expires_at=213123123123)
    offset = arena.put_value(value)
    assert arena.get_value(offset, value.encoded_size()) == value