"""Engine-wide constants."""

import os

MAX_LEVEL_NUM = 7
DEFAULT_VALUE_THRESHOLD = 1024

MANIFEST_FILENAME = "MANIFEST"
MANIFEST_REWRITE_FILENAME = "REWRITEMANIFEST"
MANIFEST_DELETIONS_REWRITE_THRESHOLD = 10000
MANIFEST_DELETIONS_RATIO = 10
DEFAULT_FILE_FLAG = os.O_RDWR | os.O_CREAT | os.O_APPEND
DEFAULT_FILE_MODE = 0o666
MAX_VALUE_LOG_SIZE = 10 << 20
DATASYNC_FILE_FLAG = 0x0

# Largest possible value log header under variable-length encoding.
MAX_HEADER_SIZE = 21
VLOG_HEADER_SIZE = 0
MAX_VLOG_FILE_SIZE = 0xFFFFFFFF
MI = 1 << 20
KV_WRITE_CH_CAPACITY = 1000

# Size of the value log file header: key id (8 bytes) and base IV (12 bytes).
VALUE_LOG_HEADER_SIZE = 20

CRC_SIZE = 4

BIT_DELETE = 1 << 0
BIT_VALUE_POINTER = 1 << 1

MAGIC_TEXT = b"HARD"
MAGIC_VERSION = 1