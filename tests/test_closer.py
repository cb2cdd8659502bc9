import threading
import time

import pytest

from corekv.closer import Closer, Throttle


def test_close_waits_for_workers():
    closer = Closer()
    closer.add(1)
    finished = []

    def worker():
        closer.close_signal.wait()
        time.sleep(0.02)
        finished.append("done")
        closer.done()

    thread = threading.Thread(target=worker)
    thread.start()
    closer.close()
    thread.join(1)
    assert finished == ["done"]
    assert closer.closed


def test_close_without_workers_returns():
    closer = Closer()
    closer.close()
    assert closer.close_signal.is_set()


def test_done_below_zero_raises():
    closer = Closer()
    with pytest.raises(ValueError):
        closer.done()


def test_double_close_raises():
    closer = Closer()
    closer.close()
    with pytest.raises(RuntimeError):
        closer.close()


def test_throttle_done_without_do_raises():
    throttle = Throttle(2)
    with pytest.raises(RuntimeError, match="mismatch"):
        throttle.done(None)


def test_throttle_finish_reports_error_every_time():
    throttle = Throttle(2)
    throttle.do()
    boom = ValueError("boom")
    throttle.done(boom)
    with pytest.raises(ValueError) as first:
        throttle.finish()
    with pytest.raises(ValueError) as second:
        throttle.finish()
    assert first.value is boom
    assert second.value is boom


def test_throttle_do_surfaces_earlier_error():
    throttle = Throttle(1)
    throttle.do()
    throttle.done(ValueError("boom"))
    with pytest.raises(ValueError, match="boom"):
        throttle.do()
    assert throttle.finish() is None


def test_throttle_blocks_beyond_limit():
    throttle = Throttle(1)
    throttle.do()
    started = threading.Event()

    def second():
        throttle.do()
        started.set()

    thread = threading.Thread(target=second)
    thread.start()
    time.sleep(0.05)
    assert not started.is_set()
    throttle.done(None)
    thread.join(1)
    assert started.is_set()
    throttle.done(None)
    assert throttle.finish() is None


def test_throttle_do_after_finish_raises():
    throttle = Throttle(1)
    throttle.finish()
    with pytest.raises(RuntimeError):
        throttle.do()


def test_throttle_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        Throttle(0)