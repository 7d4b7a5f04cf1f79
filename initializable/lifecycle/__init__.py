"""
Readiness lifecycle for objects that initialize asynchronously.
Dependents await is_ready() instead of polling or racing constructors.
"""

from initializable.lifecycle.base import Initializable, InitializableMixin, LifecycleState, Generation
from initializable.lifecycle.signal import ReadinessSignal, SignalState


__all__ = [
    "Initializable",
    "InitializableMixin",
    "LifecycleState",
    "Generation",
    "ReadinessSignal",
    "SignalState",
]
