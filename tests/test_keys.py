import os

import pytest

from corekv.codec import u64_to_bytes
from corekv.errors import ChecksumMismatchError
from corekv.keys import (
    calculate_checksum,
    compare_keys,
    create_synced_file,
    file_id,
    key_with_ts,
    load_id_map,
    mem_hash,
    parse_key,
    parse_ts,
    same_key,
    sstable_file_name,
    sync_dir,
    verify_checksum,
    vlog_file_path,
)


def test_key_with_ts_round_trip():
    key = key_with_ts(b"samplekey", 42)
    assert len(key) == len(b"samplekey") + 8
    assert parse_key(key) == b"samplekey"
    assert parse_ts(key) == 42


def test_key_with_ts_stores_inverted_big_endian_timestamp():
    assert key_with_ts(b"k", 0) == b"k" + b"\xff" * 8


def test_newer_version_sorts_first():
    assert compare_keys(key_with_ts(b"k", 10), key_with_ts(b"k", 5)) < 0
    assert compare_keys(key_with_ts(b"k", 5), key_with_ts(b"k", 10)) > 0


def test_compare_keys_orders_by_user_key_before_timestamp():
    short = key_with_ts(b"a", 1)
    longer = key_with_ts(b"aa", 100)
    assert compare_keys(short, longer) < 0
    assert compare_keys(longer, short) > 0
    assert compare_keys(short, short) == 0


def test_compare_keys_rejects_keys_without_timestamp():
    with pytest.raises(ValueError):
        compare_keys(b"12345678", key_with_ts(b"a", 1))


def test_short_keys_have_no_timestamp():
    assert parse_key(b"abc") == b"abc"
    assert parse_ts(b"12345678") == 0


def test_same_key_ignores_version():
    assert same_key(key_with_ts(b"key", 1), key_with_ts(b"key", 2))
    assert not same_key(key_with_ts(b"key", 1), key_with_ts(b"kez", 1))
    assert not same_key(key_with_ts(b"key", 1), key_with_ts(b"keys", 1))


def test_mem_hash_is_stable_within_process():
    assert mem_hash(b"abc") == mem_hash(bytearray(b"abc"))
    assert mem_hash("abc") == mem_hash(b"abc")
    assert 0 <= mem_hash(b"abc") < 2**64


@pytest.mark.parametrize(
    ("name", "expected"),
    [("00012.sst", 12), (os.path.join("some", "dir", "7.sst"), 7), ("00012.vlog", 0), ("abc.sst", 0)],
)
def test_file_id(name, expected):
    assert file_id(name) == expected


def test_vlog_file_path_pads_id():
    assert vlog_file_path("dir", 7) == "dir" + os.sep + "00007.vlog"


def test_sstable_file_name_pads_id():
    assert sstable_file_name("dir", 42) == os.path.join("dir", "00042.sst")


def test_sstable_file_name_round_trips_through_file_id(tmp_path):
    assert file_id(sstable_file_name(str(tmp_path), 123)) == 123


def test_checksum_verification():
    data = b"some block of data"
    checksum = calculate_checksum(data)
    assert 0 <= checksum < 2**32
    assert verify_checksum(data, u64_to_bytes(checksum)) is None
    with pytest.raises(ChecksumMismatchError):
        verify_checksum(data + b"!", u64_to_bytes(checksum))


def test_load_id_map(tmp_path):
    (tmp_path / "00001.sst").write_bytes(b"")
    (tmp_path / "00002.sst").write_bytes(b"")
    (tmp_path / "notes.txt").write_bytes(b"")
    (tmp_path / "00003.sst").mkdir()
    assert load_id_map(str(tmp_path)) == {1, 2}


def test_load_id_map_of_missing_dir_is_empty(tmp_path):
    assert load_id_map(str(tmp_path / "missing")) == set()


def test_create_synced_file_is_exclusive(tmp_path):
    path = tmp_path / "data.bin"
    with create_synced_file(str(path), False) as handle:
        handle.write(b"payload")
    assert path.read_bytes() == b"payload"
    with pytest.raises(FileExistsError):
        create_synced_file(str(path), True)


def test_sync_dir_of_missing_dir_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        sync_dir(str(tmp_path / "missing"))