from typing import Any, Dict, Optional

from poolbench.backends.base import BackendAdapter, GatedPoolHandle, PoolHandle
from poolbench.config import PoolConfig


class Psycopg2PoolHandle(GatedPoolHandle):
    def _checkout(self) -> Any:
        return self.raw_pool.getconn()

    def _checkin(self, resource: Any) -> None:
        self.raw_pool.putconn(resource)


class Psycopg2PoolBackend(BackendAdapter):
    """psycopg2's ``ThreadedConnectionPool``.

    The pool raises ``PoolError`` once ``maxconn`` connections are out, so
    the handle gates acquisitions.
    """

    name = "psycopg2-pool"

    def __init__(self, pool_config: Optional[PoolConfig] = None, **kwargs) -> None:
        self.pool_config = pool_config or PoolConfig()
        self._kwargs = kwargs

    def _get_connection_kwargs(self) -> Dict[str, Any]:
        kwargs = self._kwargs.copy()
        kwargs.pop("driver", None)
        kwargs.pop("min_size", None)
        kwargs.pop("max_size", None)
        kwargs.pop("pool_size", None)
        return kwargs

    def open(self) -> PoolHandle:
        try:
            import psycopg2.pool
        except ImportError:
            raise ImportError("psycopg2 is required for the psycopg2 pool backend")

        raw_pool = psycopg2.pool.ThreadedConnectionPool(
            self.pool_config.min_size,
            self.pool_config.max_size,
            **self._get_connection_kwargs(),
        )
        return Psycopg2PoolHandle(
            raw_pool,
            max_size=self.pool_config.max_size,
            timeout=self.pool_config.connection_timeout,
        )

    def close(self, handle: PoolHandle) -> None:
        handle.raw_pool.closeall()  # type: ignore[attr-defined]
