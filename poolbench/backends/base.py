import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional


class PoolHandle(ABC):
    """A live pool that hands out one resource at a time."""

    @abstractmethod
    def acquire(self) -> Any:
        """Get a resource from the pool, blocking while the pool is saturated"""
        pass

    @abstractmethod
    def release(self, resource: Any) -> None:
        """Return a resource to the pool"""
        pass

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Scoped acquisition; the resource is released even if the body raises."""
        resource = self.acquire()
        try:
            yield resource
        finally:
            self.release(resource)


class GatedPoolHandle(PoolHandle):
    """Handle for pools that raise on exhaustion instead of waiting.

    A bounded semaphore sized to the pool turns exhaustion into blocking, so
    saturated acquisitions are measured as waiting time like they are for
    blocking pools.
    """

    def __init__(self, raw_pool: Any, max_size: int, timeout: Optional[float] = None) -> None:
        self.raw_pool = raw_pool
        self._gate = threading.BoundedSemaphore(max_size)
        self._timeout = timeout

    @abstractmethod
    def _checkout(self) -> Any: ...

    @abstractmethod
    def _checkin(self, resource: Any) -> None: ...

    def acquire(self) -> Any:
        if not self._gate.acquire(timeout=self._timeout):
            raise TimeoutError(f"Timeout waiting for connection after {self._timeout:.1f}s")
        try:
            return self._checkout()
        except BaseException:
            self._gate.release()
            raise

    def release(self, resource: Any) -> None:
        try:
            self._checkin(resource)
        finally:
            self._gate.release()


class BackendAdapter(ABC):
    """One pool implementation under test: ``{name, open, close}``."""

    name: str

    @abstractmethod
    def open(self) -> PoolHandle:
        """Build the pool; it must be ready to serve before this returns"""
        pass

    @abstractmethod
    def close(self, handle: PoolHandle) -> None:
        """Release everything the pool holds"""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


@dataclass
class CallableBackend(BackendAdapter):
    """Adapter assembled from plain functions."""

    name: str
    open_pool: Callable[[], PoolHandle]
    close_pool: Callable[[PoolHandle], None]

    def open(self) -> PoolHandle:
        return self.open_pool()

    def close(self, handle: PoolHandle) -> None:
        self.close_pool(handle)
