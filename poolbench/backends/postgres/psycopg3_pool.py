from typing import Any, Dict, Optional

from poolbench.backends.base import BackendAdapter, PoolHandle
from poolbench.config import PoolConfig


class PsycopgPoolHandle(PoolHandle):
    def __init__(self, raw_pool: Any) -> None:
        self.raw_pool = raw_pool

    def acquire(self) -> Any:
        return self.raw_pool.getconn()

    def release(self, resource: Any) -> None:
        self.raw_pool.putconn(resource)


class PsycopgPoolBackend(BackendAdapter):
    """psycopg 3's ``psycopg_pool.ConnectionPool``."""

    name = "psycopg3-pool"

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
            import psycopg_pool
        except ImportError:
            raise ImportError("psycopg_pool is required for the psycopg3 pool backend")

        raw_pool = psycopg_pool.ConnectionPool(
            kwargs=self._get_connection_kwargs(),
            min_size=self.pool_config.min_size,
            max_size=self.pool_config.max_size,
            timeout=self.pool_config.connection_timeout,
            name=self.name,
            open=False,
        )
        # Block until min_size connections exist so the first sample is not a connect.
        raw_pool.open(wait=True, timeout=self.pool_config.connection_timeout)
        return PsycopgPoolHandle(raw_pool)

    def close(self, handle: PoolHandle) -> None:
        handle.raw_pool.close()  # type: ignore[attr-defined]
