from typing import Any, Dict, Optional

from poolbench.backends.base import BackendAdapter, GatedPoolHandle, PoolHandle
from poolbench.config import PoolConfig

# mysql.connector.pooling.CNX_POOL_MAXSIZE
MAX_POOL_SIZE = 32


class MySQLConnectorPoolHandle(GatedPoolHandle):
    def _checkout(self) -> Any:
        return self.raw_pool.get_connection()

    def _checkin(self, resource: Any) -> None:
        # Closing a pooled connection hands it back to its pool.
        resource.close()


class MySQLConnectorPoolBackend(BackendAdapter):
    """mysql-connector's ``MySQLConnectionPool``.

    The pool opens all ``pool_size`` connections up front and raises
    ``PoolError`` when exhausted.
    """

    name = "mysql-connector-pool"

    def __init__(self, pool_config: Optional[PoolConfig] = None, **kwargs) -> None:
        self.pool_config = pool_config or PoolConfig()
        self.kwargs = kwargs

    def _get_connection_kwargs(self) -> Dict[str, Any]:
        kwargs = self.kwargs.copy()
        kwargs.pop("driver", None)
        kwargs.pop("min_size", None)
        kwargs.pop("max_size", None)
        kwargs.pop("pool_size", None)
        return kwargs

    def open(self) -> PoolHandle:
        if self.pool_config.max_size > MAX_POOL_SIZE:
            raise ValueError(
                f"mysql-connector pools hold at most {MAX_POOL_SIZE} connections, "
                f"got max_size={self.pool_config.max_size}"
            )

        try:
            import mysql.connector.pooling
        except ImportError:
            raise ImportError(
                "mysql-connector is required for the MySQLConnector pool backend"
            )

        raw_pool = mysql.connector.pooling.MySQLConnectionPool(
            pool_name="poolbench",
            pool_size=self.pool_config.max_size,
            **self._get_connection_kwargs(),
        )
        return MySQLConnectorPoolHandle(
            raw_pool,
            max_size=self.pool_config.max_size,
            timeout=self.pool_config.connection_timeout,
        )

    def close(self, handle: PoolHandle) -> None:
        handle.raw_pool._remove_connections()  # type: ignore[attr-defined]
