from typing import Any, Iterable, List, Optional

from poolbench.backends.base import BackendAdapter
from poolbench.config import DIALECT_DRIVERS, PoolConfig, PoolDriver, parse_database_url


class BackendFactory:
    @staticmethod
    def create(
        driver: Any,
        url: str,
        pool_config: Optional[PoolConfig] = None,
        **kwargs,
    ) -> BackendAdapter:
        dialect, connection_kwargs = parse_database_url(url)
        driver = PoolDriver(driver)
        if driver not in DIALECT_DRIVERS[dialect]:
            raise ValueError(f"Driver {driver} does not support the {dialect} dialect")
        connection_kwargs.update(kwargs)

        if driver == PoolDriver.PSYCOPG3:
            from poolbench.backends.postgres.psycopg3_pool import PsycopgPoolBackend
            return PsycopgPoolBackend(pool_config, **connection_kwargs)
        elif driver == PoolDriver.PSYCOPG2:
            from poolbench.backends.postgres.psycopg2_pool import Psycopg2PoolBackend
            return Psycopg2PoolBackend(pool_config, **connection_kwargs)
        elif driver == PoolDriver.MYSQL_CONNECTOR:
            from poolbench.backends.mysql.mysql_connector_pool import MySQLConnectorPoolBackend
            return MySQLConnectorPoolBackend(pool_config, **connection_kwargs)
        else:
            raise ValueError(f"Unsupported pool driver: {driver}")

    @staticmethod
    def create_all(
        url: str,
        drivers: Optional[Iterable[Any]] = None,
        pool_config: Optional[PoolConfig] = None,
        **kwargs,
    ) -> List[BackendAdapter]:
        """One adapter per driver, defaulting to every driver of the URL's dialect."""
        if drivers is None:
            dialect, _ = parse_database_url(url)
            drivers = DIALECT_DRIVERS[dialect]
        return [BackendFactory.create(d, url, pool_config, **kwargs) for d in drivers]
