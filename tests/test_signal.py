import asyncio

import pytest

from initializable.core.exceptions import DoubleCompletionError
from initializable.lifecycle.signal import ReadinessSignal, SignalState


def test_new_signal_is_pending():
    signal = ReadinessSignal()

    assert signal.state == SignalState.PENDING
    assert signal.done is False
    assert signal.error is None


def test_completes_without_event_loop():
    signal = ReadinessSignal()
    signal.fulfil()

    assert signal.state == SignalState.FULFILLED
    assert signal.done is True


def test_second_completion_is_rejected():
    signal = ReadinessSignal()
    signal.fail(ValueError("first"))

    with pytest.raises(DoubleCompletionError) as exc_info:
        signal.fulfil()
    assert exc_info.value.details == {"outcome": "failed"}

    with pytest.raises(DoubleCompletionError):
        signal.fail(ValueError("second"))
    assert str(signal.error) == "first"


def test_observe_requires_running_loop():
    with pytest.raises(RuntimeError):
        ReadinessSignal().observe()


@pytest.mark.asyncio
async def test_pending_observers_receive_value():
    signal = ReadinessSignal()
    observers = [signal.observe() for _ in range(3)]

    signal.fulfil(True)

    assert await asyncio.gather(*observers) == [True, True, True]


@pytest.mark.asyncio
async def test_late_observer_receives_stored_error():
    signal = ReadinessSignal()
    error = ConnectionError("refused")
    signal.fail(error)

    with pytest.raises(ConnectionError) as exc_info:
        await signal.observe()
    assert exc_info.value is error


@pytest.mark.asyncio
async def test_cancelled_observer_does_not_cancel_signal():
    signal = ReadinessSignal()
    observer = signal.observe()
    observer.cancel()
    await asyncio.sleep(0)

    signal.fulfil()

    assert signal.state == SignalState.FULFILLED
    assert await signal.observe() is True
