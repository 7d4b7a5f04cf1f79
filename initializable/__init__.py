"""
initializable - asynchronous "not ready -> initializing -> ready | failed"
lifecycle with timeout, forced completion and re-initialization.
"""

__version__ = "1.0.0"

from initializable.lifecycle import (
    Initializable,
    InitializableMixin,
    LifecycleState,
    ReadinessSignal,
)
from initializable.core.exceptions import (
    InitializableException,
    InitializationTimeout,
    ForcedFailure,
    ReinitializationInterrupt,
    DoubleCompletionError,
    LifecycleStateError,
)

__all__ = [
    "Initializable",
    "InitializableMixin",
    "LifecycleState",
    "ReadinessSignal",
    "InitializableException",
    "InitializationTimeout",
    "ForcedFailure",
    "ReinitializationInterrupt",
    "DoubleCompletionError",
    "LifecycleStateError",
    "__version__",
]
