# corekv

Core data structures for a log-structured key-value store, in pure Python
with no runtime dependencies.

## What is inside

- `corekv.entry` — `Entry`, `ValueStruct`, `Header`, `WalHeader`, `ValuePtr`
  and `HashReader`, with the varint/CRC-32C encodings used for value log and
  write-ahead log records (`wal_codec`, `estimate_wal_codec_size`), plus
  `is_value_ptr`, `is_deleted_or_expired` and `discard_entry`.
- `corekv.codec` — byte helpers: `crc32c`, `encode_uvarint`,
  `decode_uvarint`, `size_varint`, big-endian `u32_to_bytes`/`u64_to_bytes`
  and their inverses, and little-endian uint32 list packing.
- `corekv.keys` — versioned keys (`key_with_ts`, `parse_key`, `parse_ts`,
  `compare_keys`, `same_key`), file naming (`vlog_file_path`,
  `sstable_file_name`, `file_id`, `load_id_map`), `create_synced_file`,
  `sync_dir`, `mem_hash`, and checksums (`calculate_checksum`,
  `verify_checksum`).
- `corekv.bloom` — a bloom `Filter` built from key hashes with `new_filter`;
  keys are hashed with `bloom_hash`, and `bloom_bits_per_key` sizes a filter
  for a false positive rate.
- `corekv.skiplist` — an arena-backed `SkipList` with a `SkipListIterator`
  (`rewind`, `seek`, `valid`, `item`, `next`); iterating a `SkipList`
  yields its entries in key order.
- `corekv.randutil` — thread-safe random helpers (`int63n`, `rand_n`,
  `random_float`) and `build_entry`, which makes a random `Entry`.
- `corekv.closer` — `Closer` (signal workers to stop and wait for them) and
  `Throttle` (bound the number of running workers and collect their errors).
- `corekv.coremap` — `CoreMap`, a thread-safe map keyed by the hash of its keys.
- `corekv.cache` — a W-TinyLFU `Cache` (`corekv.cache.cache`) made of a
  `WindowLRU` and a `SegmentedLRU` (`corekv.cache.lru`), a `CountMinSketch`
  (`corekv.cache.sketch`) and a doorkeeper `BloomFilter`
  (`corekv.cache.doorkeeper`).
- `corekv.errors` — the `CoreKVError` hierarchy, `cond_panic` and `log_error`.
- `corekv.const` — shared constants such as `BIT_DELETE` and `BIT_VALUE_POINTER`.

## Installation

    pip install .

## Examples

Skiplist:

    from corekv.entry import Entry
    from corekv.skiplist import SkipList

    sl = SkipList(1000)
    sl.add(Entry(b"Key1", b"Val1"))
    assert sl.search(b"Key1").value == b"Val1"
    assert sl.search(b"missing") is None
    keys = [e.key for e in sl]

Bloom filter:

    from corekv.bloom import bloom_hash, new_filter

    f = new_filter([bloom_hash(b"hello"), bloom_hash(b"world")], 10)
    assert f.may_contain_key(b"hello")

Cache:

    from corekv.cache.cache import Cache

    cache = Cache(5)
    cache.set("key1", "val1")
    value, found = cache.get("key1")
    old, removed = cache.delete("key1")

`Cache` takes an optional `reset_threshold`; when it is positive, access
frequencies are halved and the doorkeeper is cleared after that many `get`
calls.

Value encoding round trip:

    from corekv.entry import ValueStruct

    vs = ValueStruct(meta=2, value=b"data", expires_at=213123123123)
    assert ValueStruct.decode(vs.encode()) == vs

## What this package does not do

These are building blocks only. There is no database object that ties them
together: no value log files, write-ahead log files, SSTables, manifest,
compaction or garbage collection, and nothing is stored on disk by the
package beyond what `create_synced_file` creates for the caller. There is no
command-line tool and no server.

## Running the tests

    pip install .[test]
    pytest