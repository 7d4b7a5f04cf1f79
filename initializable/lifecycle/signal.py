"""One-shot readiness signal observed by any number of awaiters."""
import asyncio
from enum import Enum
from typing import Optional

from ..core.exceptions import DoubleCompletionError


class SignalState(Enum):
    """Outcome of a readiness signal."""
    PENDING = "pending"
    FULFILLED = "fulfilled"
    FAILED = "failed"


def _consume_exception(future: asyncio.Future) -> None:
    # Observers hold their own shielded futures; the shared one must not
    # report "exception was never retrieved" when nobody awaited it.
    if not future.cancelled():
        future.exception()


class ReadinessSignal:
    """
    Broadcast one-shot completion cell.

    Moves from PENDING to FULFILLED(value) or FAILED(error) exactly once.
    The outcome is kept on the instance, so it can be completed and queried
    without an event loop; the shared future is created lazily the first
    time someone observes the signal while it is still pending.
    """

    def __init__(self):
        self._state = SignalState.PENDING
        self._value: Optional[bool] = None
        self._error: Optional[BaseException] = None
        self._future: Optional[asyncio.Future] = None

    @property
    def state(self) -> SignalState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state is not SignalState.PENDING

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def fulfil(self, value: bool = True) -> None:
        """Complete the signal successfully. Raises DoubleCompletionError if already terminal."""
        self._check_pending()
        self._state = SignalState.FULFILLED
        self._value = value
        if self._future is not None:
            self._future.set_result(value)

    def fail(self, error: BaseException) -> None:
        """Complete the signal with an error. Raises DoubleCompletionError if already terminal."""
        self._check_pending()
        self._state = SignalState.FAILED
        self._error = error
        if self._future is not None:
            self._future.set_exception(error)

    def observe(self) -> asyncio.Future:
        """
        Return a future carrying this signal's outcome.

        Must be called with a running event loop. Every call returns an
        independent observer: cancelling it leaves the signal untouched.
        """
        loop = asyncio.get_running_loop()
        if self._state is SignalState.PENDING:
            if self._future is None:
                self._future = loop.create_future()
                self._future.add_done_callback(_consume_exception)
            return asyncio.shield(self._future)

        observer = loop.create_future()
        if self._state is SignalState.FULFILLED:
            observer.set_result(self._value)
        else:
            observer.set_exception(self._error)
        return observer

    def _check_pending(self) -> None:
        if self._state is not SignalState.PENDING:
            raise DoubleCompletionError(self._state.value)

    def __repr__(self) -> str:
        return f"<ReadinessSignal {self._state.value}>"
