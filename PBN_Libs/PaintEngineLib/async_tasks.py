"""
Background image tasks with "last result wins" delivery.

Image work such as highlight regeneration runs on a thread pool so it never
blocks stroke handling. Requests are numbered as they are submitted; a
completion is delivered only when it is newer than the last delivered one, so
a slow, older request can never overwrite a newer result. There is no
explicit cancellation: superseded results are dropped when they arrive.

Classes:
    LatestResultExecutor: Thread pool with sequence-checked delivery
"""

import concurrent.futures
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class LatestResultExecutor:
    """
    Runs tasks in the background and delivers only the freshest result.

    Example:
        >>> with LatestResultExecutor() as executor:
        ...     delivery = executor.submit(create_color_highlight, image, "#FF0000",
        ...                                on_result=show)
        ...     delivered = delivery.result()
    """

    def __init__(self, max_workers: Optional[int] = 2):
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
        self._lock = threading.RLock()
        self._issued = 0
        self._delivered = 0
        self._latest_result: Any = None

    def __enter__(self) -> "LatestResultExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def latest_result(self) -> Any:
        """Most recently delivered result (None before the first delivery)."""
        with self._lock:
            return self._latest_result

    @property
    def latest_sequence(self) -> int:
        with self._lock:
            return self._delivered

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        **kwargs: Any,
    ) -> concurrent.futures.Future:
        """
        Submit a task.

        Args:
            fn: Callable to run in the pool
            *args: Positional arguments for fn
            on_result: Called with the result if it is the freshest so far
            on_error: Called with the exception if the task fails; the last
                      delivered result stays in place
            **kwargs: Keyword arguments for fn

        Returns:
            A delivery Future, completed after the callbacks ran: True if the
            result was delivered, False if it was stale. It carries the
            task's exception if the task failed.
        """
        with self._lock:
            self._issued += 1
            sequence = self._issued

        delivery: concurrent.futures.Future = concurrent.futures.Future()
        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(
            lambda done: self._complete(sequence, done, delivery, on_result, on_error)
        )
        return delivery

    def _complete(
        self,
        sequence: int,
        future: concurrent.futures.Future,
        delivery: concurrent.futures.Future,
        on_result: Optional[ResultCallback],
        on_error: Optional[ErrorCallback],
    ) -> None:
        if future.cancelled():
            delivery.cancel()
            return

        error = future.exception()
        if error is not None:
            logger.error(f"Background task {sequence} failed: {error}")
            # A failed request still supersedes older ones; latest_result is kept
            with self._lock:
                self._delivered = max(self._delivered, sequence)
            try:
                if on_error is not None:
                    on_error(error)
            finally:
                delivery.set_exception(error)
            return

        try:
            with self._lock:
                if sequence <= self._delivered:
                    logger.debug(
                        f"Dropping stale result {sequence} (latest delivered {self._delivered})"
                    )
                    delivered = False
                else:
                    self._delivered = sequence
                    self._latest_result = future.result()
                    # Callbacks run under the lock: delivery order follows sequence order
                    if on_result is not None:
                        on_result(self._latest_result)
                    delivered = True
        except Exception as e:
            delivery.set_exception(e)
            raise
        delivery.set_result(delivered)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
