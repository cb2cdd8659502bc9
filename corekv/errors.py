"""Error types shared across the storage engine."""

from __future__ import annotations

import logging

_logger = logging.getLogger("corekv")


class CoreKVError(Exception):
    """Base class for every error raised by the engine."""

    default_message = "corekv error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class KeyNotFoundError(CoreKVError):
    """A key is not present."""

    default_message = "Key not found"


class EmptyKeyError(CoreKVError):
    """An empty key was passed where one is required."""

    default_message = "Key cannot be empty"


class RewriteFailureError(CoreKVError):
    """Rewriting a file failed."""

    default_message = "reWrite failure"


class BadMagicError(CoreKVError):
    """A file does not start with the expected magic bytes."""

    default_message = "bad magic"


class BadChecksumError(CoreKVError):
    """A stored checksum is malformed."""

    default_message = "bad check sum"


class ChecksumMismatchError(CoreKVError):
    """Data does not match its checksum."""

    default_message = "checksum mismatch"


class TruncateError(CoreKVError):
    """A log ends in an incomplete or corrupt record and should be truncated."""

    default_message = "Do truncate"


class StopSignal(CoreKVError):
    """Raised by a callback to stop an iteration early."""

    default_message = "Stop"


class FillTablesError(CoreKVError):
    """Compaction could not fill its tables."""

    default_message = "Unable to fill tables"


class BlockedWritesError(CoreKVError):
    """Writes are blocked."""

    default_message = "Writes are blocked, possibly due to DropAll or Close"


class TxnTooBigError(CoreKVError):
    """A transaction does not fit into one request."""

    default_message = "Txn is too big to fit into one request"


class DeleteVlogFileError(CoreKVError):
    """A value log file holds nothing valid and should be deleted."""

    default_message = "Delete vlog file"


class NoRoomError(CoreKVError):
    """There is no room left for a write."""

    default_message = "No room for write"


class InvalidRequestError(CoreKVError):
    """A user request is invalid."""

    default_message = "Invalid request"


class NoRewriteError(CoreKVError):
    """A value log GC run did not rewrite any file."""

    default_message = "Value log GC attempt didn't result in any cleanup"


class RejectedError(CoreKVError):
    """A value log GC request was rejected."""

    default_message = "Value log GC request rejected"


def cond_panic(condition: bool, err: BaseException | str) -> None:
    """Raise ``err`` when ``condition`` holds.

    A plain message is wrapped in a :class:`CoreKVError`.
    """
    if not condition:
        return
    if isinstance(err, BaseException):
        raise err
    raise CoreKVError(str(err))


def log_error(err: BaseException | None) -> BaseException | None:
    """Log ``err`` if it is set and hand it back unchanged."""
    if err is not None:
        _logger.error("%s", err)
    return err