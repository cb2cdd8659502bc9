"""Shutdown signalling for background workers and a bounded worker throttle."""

from __future__ import annotations

import threading
from collections import deque


class Closer:
    """Tells background workers to stop and waits until they all report done."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending = 0
        self.close_signal = threading.Event()

    @property
    def closed(self) -> bool:
        return self.close_signal.is_set()

    def add(self, n: int) -> None:
        """Register ``n`` more workers (or fewer, if ``n`` is negative)."""
        with self._cond:
            if self._pending + n < 0:
                raise ValueError("closer: negative worker counter")
            self._pending += n
            if self._pending == 0:
                self._cond.notify_all()

    def done(self) -> None:
        """Report that one worker has finished releasing its resources."""
        self.add(-1)

    def close(self) -> None:
        """Signal every worker to stop and wait until all have called done()."""
        with self._cond:
            if self.close_signal.is_set():
                raise RuntimeError("closer already closed")
            self.close_signal.set()
            self._cond.wait_for(lambda: self._pending == 0)


class Throttle:
    """Lets at most ``max_workers`` workers run at once and collects their errors."""

    def __init__(self, max_workers: int) -> None:
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self._max = max_workers
        self._active = 0
        self._errors: deque[BaseException] = deque()
        self._cond = threading.Condition()
        self._finished = False
        self._finish_error: BaseException | None = None

    def do(self) -> None:
        """Claim a worker slot, blocking while all are taken.

        Raises the error of a previously finished worker if one is pending.
        """
        with self._cond:
            while True:
                if self._finished:
                    raise RuntimeError("throttle already finished")
                if self._errors:
                    raise self._errors.popleft()
                if self._active < self._max:
                    self._active += 1
                    return
                self._cond.wait()

    def done(self, err: BaseException | None = None) -> None:
        """Release a worker slot, recording ``err`` if the work failed."""
        with self._cond:
            if err is not None:
                self._errors.append(err)
            if self._active == 0:
                raise RuntimeError("Throttle Do Done mismatch")
            self._active -= 1
            self._cond.notify_all()

    def finish(self) -> None:
        """Wait for all workers, then raise the first recorded error, if any.

        Later calls do not wait again and raise the same error.
        """
        with self._cond:
            if not self._finished:
                self._cond.wait_for(lambda: self._active == 0)
                self._finished = True
                self._finish_error = self._errors[0] if self._errors else None
                self._errors.clear()
                self._cond.notify_all()
            err = self._finish_error
        if err is not None:
            raise err