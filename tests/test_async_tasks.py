"""
Tests for LatestResultExecutor.

Tests that only the freshest result is delivered and that failures leave the
previous result in place while still superseding older requests.
"""

import threading
from unittest.mock import Mock

import pytest

from PBN_Libs.PaintEngineLib.async_tasks import LatestResultExecutor

TIMEOUT = 5


def wait_and_return(event, value):
    event.wait(TIMEOUT)
    return value


def fail(message):
    raise RuntimeError(message)


@pytest.fixture
def executor():
    pool = LatestResultExecutor(max_workers=2)
    yield pool
    pool.shutdown()


class TestLatestResultExecutor:
    """Tests for sequence-checked delivery."""

    def test_delivers_result(self, executor):
        on_result = Mock()

        delivery = executor.submit(lambda x: x * 2, 21, on_result=on_result)

        assert delivery.result(TIMEOUT) is True
        on_result.assert_called_once_with(42)
        assert executor.latest_result == 42
        assert executor.latest_sequence == 1

    def test_stale_result_dropped(self, executor):
        """A slow older request finishing last must not overwrite the newer result."""
        release_old = threading.Event()
        delivered = []

        old = executor.submit(wait_and_return, release_old, "old", on_result=delivered.append)
        new = executor.submit(lambda: "new", on_result=delivered.append)

        assert new.result(TIMEOUT) is True
        release_old.set()
        assert old.result(TIMEOUT) is False

        assert delivered == ["new"]
        assert executor.latest_result == "new"
        assert executor.latest_sequence == 2

    def test_error_keeps_previous_result(self, executor):
        on_error = Mock()
        executor.submit(lambda: "good").result(TIMEOUT)

        delivery = executor.submit(fail, "boom", on_error=on_error)

        with pytest.raises(RuntimeError):
            delivery.result(TIMEOUT)
        on_error.assert_called_once()
        assert executor.latest_result == "good"

    def test_failed_newer_request_drops_older(self, executor):
        """An older request finishing after a newer failed one is still stale."""
        release_old = threading.Event()
        on_result = Mock()

        old = executor.submit(wait_and_return, release_old, "old", on_result=on_result)
        newer = executor.submit(fail, "boom")

        with pytest.raises(RuntimeError):
            newer.result(TIMEOUT)
        release_old.set()

        assert old.result(TIMEOUT) is False
        on_result.assert_not_called()
        assert executor.latest_result is None
        assert executor.latest_sequence == 2

    def test_keyword_arguments_forwarded(self, executor):
        delivery = executor.submit(lambda a, b=0: a + b, 1, b=2)

        delivery.result(TIMEOUT)

        assert executor.latest_result == 3

    def test_context_manager(self):
        with LatestResultExecutor() as pool:
            assert pool.submit(lambda: "done").result(TIMEOUT) is True
            assert pool.latest_result == "done"
