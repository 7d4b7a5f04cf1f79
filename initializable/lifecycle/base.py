"""Asynchronous readiness lifecycle for any object."""
import asyncio
import dataclasses
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Union

from ..core.config import get_settings
from ..core.exceptions import (
    InitializationTimeout,
    ForcedFailure,
    ReinitializationInterrupt,
    LifecycleStateError,
)
from ..core.logging import LogContext, get_logger
from .signal import ReadinessSignal, SignalState


def _discard_outcome(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


class LifecycleState(Enum):
    """Lifecycle states derived from the current generation."""
    NOT_READY = "not_ready"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Generation:
    """One pending -> terminal cycle. Replaced, never mutated."""
    number: int
    signal: ReadinessSignal
    task: Optional[asyncio.Task] = None


class InitializableMixin:
    """
    Mixin giving an object an asynchronous
    not ready -> initializing -> ready | failed lifecycle.

    Override in subclasses:
    - on_init(): the actual setup work (may await anything)
    - on_ready(): runs once after a successful initialization
    - timeout_limit: seconds allowed for on_init()

    Callers await is_ready() instead of polling. The mixin does not start
    anything by itself; call initialize() once an event loop is running,
    or use Initializable which does it from its constructor.

    Limitation: on_ready() runs in the background and its errors are only
    logged. They never reach is_ready() observers.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._generation = Generation(number=0, signal=ReadinessSignal())
        self._ready_tasks: Set[asyncio.Task] = set()
        self._lifecycle_logger = get_logger("lifecycle").bind(owner=type(self).__name__)

    # ------------------------------------------------------------------
    # Extension points
    # ------------------------------------------------------------------

    @property
    def timeout_limit(self) -> Union[float, timedelta]:
        """Seconds (or a timedelta) on_init() may take. Read once per initialize()."""
        return get_settings().INIT_TIMEOUT_SECONDS

    async def on_init(self) -> None:
        """Called during initialization. Override with setup logic."""

    async def on_ready(self) -> None:
        """Called after a successful initialization. Does nothing by default."""

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        """True once the readiness signal is terminal, whether it succeeded or failed."""
        return self._generation.signal.done

    def is_ready(self) -> asyncio.Future:
        """
        Future resolving to True when ready, or raising the initialization error.

        Each call returns a new observer bound to the current generation.
        """
        return self._generation.signal.observe()

    @property
    def state(self) -> LifecycleState:
        generation = self._generation
        signal_state = generation.signal.state
        if signal_state is SignalState.FULFILLED:
            return LifecycleState.READY
        if signal_state is SignalState.FAILED:
            return LifecycleState.FAILED
        # pending with no live task: never started, or on_init() cancelled itself
        if generation.task is None or generation.task.done():
            return LifecycleState.NOT_READY
        return LifecycleState.INITIALIZING

    @property
    def generation(self) -> int:
        return self._generation.number

    def get_status(self) -> Dict[str, Any]:
        """Return a snapshot of the lifecycle for diagnostics."""
        error = self._generation.signal.error
        limit = self.timeout_limit
        return {
            "owner": type(self).__name__,
            "state": self.state.value,
            "generation": self.generation,
            "timeout_seconds": limit.total_seconds() if isinstance(limit, timedelta) else limit,
            "error": str(error) if error else None,
            "error_type": type(error).__name__ if error else None,
        }

    # ------------------------------------------------------------------
    # Lifecycle control
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Start initialization for the current generation.

        Raises:
            LifecycleStateError: If the current generation was already started
        """
        current = self._generation
        if current.task is not None:
            raise LifecycleStateError(
                f"{type(self).__name__} generation {current.number} was already started; "
                "use re_initialize() to start over",
                details={"generation": current.number},
            )

        timeout = self._resolve_timeout()
        task = asyncio.get_running_loop().create_task(
            self._run_init(current.number, current.signal, timeout),
            name=f"{type(self).__name__}.init#{current.number}",
        )
        self._generation = dataclasses.replace(current, task=task)
        self._lifecycle_logger.debug(
            "initialization_started",
            generation=current.number,
            timeout_seconds=timeout,
        )

    def force_ready(self, fail: bool = False, error_msg: Optional[str] = None) -> None:
        """
        Mark the lifecycle terminal without waiting for on_init().

        Cancels a running initialization task, then fulfils the signal, or
        fails it with ForcedFailure(error_msg) when fail is True.

        Raises:
            DoubleCompletionError: If the lifecycle already reached a terminal state
        """
        if error_msg is None:
            error_msg = get_settings().FORCE_READY_MESSAGE

        current = self._generation
        self._cancel_task(current)

        if fail:
            current.signal.fail(ForcedFailure(error_msg))
            self._lifecycle_logger.warning(
                "force_ready_failed", generation=current.number, error=error_msg
            )
        else:
            current.signal.fulfil(True)
            self._lifecycle_logger.info("force_ready", generation=current.number)

    def re_initialize(self) -> None:
        """
        Discard the current generation and initialize again.

        A still pending generation is failed with ReinitializationInterrupt
        so its observers are released.
        """
        previous = self._generation
        self._cancel_task(previous)

        if not previous.signal.done:
            previous.signal.fail(
                ReinitializationInterrupt(type(self).__name__, previous.number)
            )

        self._generation = Generation(
            number=previous.number + 1, signal=ReadinessSignal()
        )
        self._lifecycle_logger.info(
            "reinitializing",
            previous_generation=previous.number,
            generation=self._generation.number,
        )
        self.initialize()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_timeout(self) -> float:
        """
        Read timeout_limit as seconds.

        Raises:
            LifecycleStateError: If it is not a positive number or timedelta
        """
        limit = self.timeout_limit
        if isinstance(limit, timedelta):
            limit = limit.total_seconds()
        if isinstance(limit, bool) or not isinstance(limit, (int, float)) or not limit > 0:
            raise LifecycleStateError(
                f"{type(self).__name__}.timeout_limit must be a positive number of seconds "
                f"or a timedelta, got {self.timeout_limit!r}",
                details={"timeout_limit": repr(self.timeout_limit)},
            )
        return float(limit)

    def _cancel_task(self, generation: Generation) -> None:
        task = generation.task
        if task is not None and not task.done():
            task.cancel()

    def _is_current(self, number: int, signal: ReadinessSignal) -> bool:
        if self._generation.number != number or signal.done:
            self._lifecycle_logger.debug("stale_completion_ignored", generation=number)
            return False
        return True

    def _fail(self, number: int, signal: ReadinessSignal, error: BaseException) -> None:
        if not self._is_current(number, signal):
            return
        signal.fail(error)
        self._lifecycle_logger.error(
            "initialization_failed",
            generation=number,
            error=str(error),
            error_type=type(error).__name__,
            exc_info=error,
        )

    async def _run_init(self, number: int, signal: ReadinessSignal, timeout: float) -> None:
        # on_init(), on_ready() and their logs inherit owner/generation context
        with LogContext(lifecycle_owner=type(self).__name__, lifecycle_generation=number):
            await self._race_init(number, signal, timeout)

    async def _race_init(self, number: int, signal: ReadinessSignal, timeout: float) -> None:
        try:
            init_task = asyncio.ensure_future(self.on_init())
        except Exception as e:
            # on_init() raised before returning an awaitable
            self._fail(number, signal, e)
            return

        try:
            done, _ = await asyncio.wait({init_task}, timeout=timeout)
        except asyncio.CancelledError:
            init_task.cancel()
            init_task.add_done_callback(_discard_outcome)
            self._lifecycle_logger.info("initialization_cancelled", generation=number)
            raise
        except Exception as e:
            init_task.cancel()
            init_task.add_done_callback(_discard_outcome)
            self._fail(number, signal, e)
            return

        if not done:
            if self._is_current(number, signal):
                signal.fail(InitializationTimeout(type(self).__name__, timeout))
                self._lifecycle_logger.error(
                    "initialization_timed_out", generation=number, timeout_seconds=timeout
                )
            init_task.cancel()
            init_task.add_done_callback(_discard_outcome)
            return

        if init_task.cancelled():
            # on_init() cancelled itself; nothing to report for this generation
            self._lifecycle_logger.warning("on_init_cancelled", generation=number)
            return

        error = init_task.exception()
        if error is not None:
            self._fail(number, signal, error)
            return

        if not self._is_current(number, signal):
            return
        signal.fulfil(True)
        self._lifecycle_logger.info("initialization_completed", generation=number)

        ready_task = asyncio.get_running_loop().create_task(
            self._run_on_ready(number),
            name=f"{type(self).__name__}.ready#{number}",
        )
        self._ready_tasks.add(ready_task)
        ready_task.add_done_callback(self._ready_tasks.discard)

    async def _run_on_ready(self, number: int) -> None:
        try:
            await self.on_ready()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._lifecycle_logger.error(
                "on_ready_failed",
                generation=number,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )


class Initializable(InitializableMixin):
    """
    Ready-made lifecycle owner that starts initializing on construction.

    Subclass and override on_init()/on_ready()/timeout_limit, or compose by
    passing the hooks in:

        cache = Initializable(on_init=warm_cache, timeout_limit=5)
        await cache.is_ready()

    Must be constructed while an event loop is running.
    """

    def __init__(
        self,
        on_init: Optional[Callable[[], Awaitable[None]]] = None,
        on_ready: Optional[Callable[[], Awaitable[None]]] = None,
        timeout_limit: Optional[Union[float, timedelta]] = None,
    ):
        super().__init__()
        self._on_init_hook = on_init
        self._on_ready_hook = on_ready
        self._timeout_override = timeout_limit
        self.initialize()

    @property
    def timeout_limit(self) -> Union[float, timedelta]:
        if self._timeout_override is not None:
            return self._timeout_override
        return super().timeout_limit

    async def on_init(self) -> None:
        if self._on_init_hook is not None:
            await self._on_init_hook()

    async def on_ready(self) -> None:
        if self._on_ready_hook is not None:
            await self._on_ready_hook()
