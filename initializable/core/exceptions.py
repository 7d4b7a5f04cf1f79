"""
initializable/core/exceptions.py
Custom exceptions for lifecycle control
"""

from typing import Optional


class InitializableException(Exception):
    """Base exception for all lifecycle errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging/response"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ============================================================================
# Initialization Outcome Exceptions
# ============================================================================

class InitializationTimeout(InitializableException, TimeoutError):
    """on_init() did not finish within timeout_limit"""

    def __init__(self, owner: str, timeout_seconds: float):
        self.owner = owner
        self.timeout_seconds = timeout_seconds
        super().__init__(
            message=f"Timeout on initialization provider {owner} after {timeout_seconds}s",
            error_code="INIT_TIMEOUT",
            details={"owner": owner, "timeout_seconds": timeout_seconds}
        )


class ForcedFailure(InitializableException):
    """Initialization was failed explicitly through force_ready(fail=True)"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="FORCED_FAILURE",
        )


class ReinitializationInterrupt(InitializableException):
    """A pending generation was discarded by re_initialize()"""

    def __init__(self, owner: str, generation: int):
        self.owner = owner
        self.generation = generation
        super().__init__(
            message=f"Reinitializing object type {owner}",
            error_code="REINITIALIZED",
            details={"owner": owner, "generation": generation}
        )


# ============================================================================
# Programming Errors
# ============================================================================

class DoubleCompletionError(InitializableException):
    """A readiness signal that already reached a terminal state was completed again"""

    def __init__(self, outcome: str):
        super().__init__(
            message=f"Readiness signal is already {outcome}",
            error_code="DOUBLE_COMPLETION",
            details={"outcome": outcome}
        )


class LifecycleStateError(InitializableException):
    """Operation is not valid in the lifecycle's current state"""

    def __init__(self, reason: str, details: Optional[dict] = None):
        super().__init__(
            message=reason,
            error_code="INVALID_LIFECYCLE_STATE",
            details=details
        )


# ============================================================================
# Export
# ============================================================================

__all__ = [
    "InitializableException",
    "InitializationTimeout",
    "ForcedFailure",
    "ReinitializationInterrupt",
    "DoubleCompletionError",
    "LifecycleStateError",
]
