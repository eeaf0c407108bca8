from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Tuple
from urllib.parse import parse_qs, urlparse


class DatabaseDialect(StrEnum):
    POSTGRES = "postgres"
    MYSQL = "mysql"


class PoolDriver(StrEnum):
    PSYCOPG3 = "psycopg3"
    PSYCOPG2 = "psycopg2"
    MYSQL_CONNECTOR = "mysql-connector"


DIALECT_DRIVERS: Dict[DatabaseDialect, Tuple[PoolDriver, ...]] = {
    DatabaseDialect.POSTGRES: (PoolDriver.PSYCOPG3, PoolDriver.PSYCOPG2),
    DatabaseDialect.MYSQL: (PoolDriver.MYSQL_CONNECTOR,),
}


@dataclass
class BenchmarkConfig:
    trial_count: int = 3
    thread_count: int = 32
    iterations_per_thread: int = 10000
    tail_percentile: float = 0.999
    trial_timeout: float = 3600.0  # 1 hour in seconds
    warmup: bool = True

    def __post_init__(self):
        if self.trial_count < 1:
            raise ValueError(f"trial_count must be >= 1, got {self.trial_count}")
        if self.thread_count < 1:
            raise ValueError(f"thread_count must be >= 1, got {self.thread_count}")
        if self.iterations_per_thread < 1:
            raise ValueError(
                f"iterations_per_thread must be >= 1, got {self.iterations_per_thread}"
            )
        if not 0.0 <= self.tail_percentile <= 1.0:
            raise ValueError(
                f"tail_percentile must be within [0, 1], got {self.tail_percentile}"
            )
        if self.trial_timeout <= 0:
            raise ValueError(f"trial_timeout must be positive, got {self.trial_timeout}")

    @property
    def expected_samples(self) -> int:
        return self.thread_count * self.iterations_per_thread


@dataclass
class PoolConfig:
    min_size: int = 16
    max_size: int = 16
    connection_timeout: float = 30.0

    def __post_init__(self):
        if self.min_size < 0:
            raise ValueError(f"min_size must be >= 0, got {self.min_size}")
        if self.max_size < max(self.min_size, 1):
            raise ValueError(
                f"max_size must be >= min_size and >= 1, got {self.max_size}"
            )


def _parse_query(query: str) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for key, raw in parse_qs(query).items():
        item: Any = raw[0] if len(raw) == 1 else raw
        if isinstance(item, str):
            if item.isdigit():
                item = int(item)
            elif item.replace('.', '').isdigit() and item.count('.') == 1:
                item = float(item)
            elif item.lower() in ('true', 'false'):
                item = item.lower() == 'true'
            elif item.lower() in ('none', 'null'):
                item = None
        values[key] = item
    return values


def parse_database_url(url: str) -> Tuple[DatabaseDialect, Dict[str, Any]]:
    """Split a database URL into its dialect and driver keyword arguments.

    ``postgresql+psycopg://user:pw@host:5432/db?sslmode=disable`` gives
    ``(POSTGRES, {"host": ..., "port": 5432, "dbname": "db", ...})``.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower().split('+')[0]

    if scheme in ('postgres', 'postgresql'):
        dialect = DatabaseDialect.POSTGRES
        kwargs: Dict[str, Any] = {
            'host': parsed.hostname or 'localhost',
            'port': parsed.port or 5432,
            'dbname': parsed.path.lstrip('/'),
            'user': parsed.username,
            'password': parsed.password,
        }
    elif scheme in ('mysql', 'mariadb'):
        dialect = DatabaseDialect.MYSQL
        kwargs = {
            'host': parsed.hostname or 'localhost',
            'port': parsed.port or 3306,
            'database': parsed.path.lstrip('/'),
            'user': parsed.username,
            'password': parsed.password,
        }
    else:
        raise ValueError(f"Unsupported database URL scheme: {parsed.scheme!r}")

    if parsed.query:
        kwargs.update(_parse_query(parsed.query))

    return dialect, {k: v for k, v in kwargs.items() if v not in (None, '')}
