"""Cooperative cancellation for the blocking parts of a dispatch."""

import threading
from typing import Any, Callable

from ..errors import CancelledError

# How often a waiting caller re-checks the token while a call is in flight
CALL_POLL_INTERVAL = 0.05


class CancelToken:
    """
    Cancellation context shared between the caller and the correlator.

    The correlator runs every API call through call() and sleeps on the
    token between polls, so cancel() from another thread (or a signal
    handler) interrupts both an in-flight request and the backoff wait.

    Example:
        token = CancelToken()
        threading.Timer(10, token.cancel).start()
        correlator.dispatch_and_correlate(workflow, ref, inputs, cancel=token)
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        """Raise CancelledError if cancel() has been called."""
        if self._event.is_set():
            raise CancelledError("operation cancelled")

    def sleep(self, seconds: float) -> None:
        """
        Block for up to `seconds`, returning early if cancelled.

        Raises:
            CancelledError: If cancelled before or during the wait
        """
        if self._event.wait(seconds):
            raise CancelledError("operation cancelled")

    def call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a blocking call on a worker thread and wait for it or for cancel().

        A cancelled call is abandoned: its worker keeps running until the
        transport timeout ends it, and its result or error is dropped.

        Returns:
            Whatever `func` returns

        Raises:
            CancelledError: If cancelled before the call or while it is in flight
            Exception: Whatever `func` raises
        """
        self.check()
        done = threading.Event()
        outcome = {}

        def target():
            try:
                outcome['result'] = func(*args, **kwargs)
            except BaseException as e:
                outcome['error'] = e
            finally:
                done.set()

        worker = threading.Thread(target=target, name='rgh-call', daemon=True)
        worker.start()
        while not done.wait(CALL_POLL_INTERVAL):
            self.check()
        # A result that arrives after cancel() is discarded
        self.check()

        if 'error' in outcome:
            raise outcome['error']
        return outcome['result']
