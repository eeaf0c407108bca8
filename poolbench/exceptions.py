from typing import Optional


class BenchmarkError(Exception):
    """Base class for benchmark harness errors."""


class BackendOpenError(BenchmarkError):
    """A backend adapter could not produce a pool."""

    def __init__(self, backend: str, cause: Optional[BaseException] = None) -> None:
        self.backend = backend
        self.cause = cause
        message = f"Failed to open backend {backend!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class WorkerAbort(BenchmarkError):
    """Raised from a workload or pool handle to stop the current worker.

    Samples recorded before the abort are kept.
    """


class TrialTimeoutError(BenchmarkError, TimeoutError):
    def __init__(self, backend: str, trial: int, timeout: float) -> None:
        self.backend = backend
        self.trial = trial
        self.timeout = timeout
        super().__init__(
            f"Trial {trial} of {backend!r} did not complete within {timeout:.1f}s"
        )


class EmptySampleError(BenchmarkError, ValueError):
    """Statistics were requested over zero samples."""
