"""Core data structures for a log-structured key-value store: codecs, keys, bloom filters, a skiplist and a cache."""

__version__ = "0.1.0"