import re
from typing import Any, Callable, Optional

TimedWorkload = Callable[[Any], Any]

_PLACEHOLDERS = {
    "format": "%s",
    "pyformat": "%(value)s",
    "qmark": "?",
    "numeric": ":1",
    "named": ":value",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class ExistsQuery:
    """Existence check run once per acquired connection.

    Without a table this is a bare ``SELECT 1`` round trip.
    """

    def __init__(
        self,
        table: Optional[str] = None,
        column: str = "id",
        value: Any = "",
        paramstyle: str = "format",
    ) -> None:
        if paramstyle not in _PLACEHOLDERS:
            raise ValueError(f"Unsupported paramstyle: {paramstyle}")
        for identifier in (table, column):
            if identifier is not None and not _IDENTIFIER.match(identifier):
                raise ValueError(f"Invalid SQL identifier: {identifier!r}")

        self.table = table
        self.column = column
        self.value = value
        self.paramstyle = paramstyle

        if table is None:
            self.sql = "SELECT 1"
            self.parameters: Any = ()
        else:
            placeholder = _PLACEHOLDERS[paramstyle]
            self.sql = (
                f"SELECT EXISTS(SELECT 1 FROM {table} WHERE {column} = {placeholder})"
            )
            if paramstyle in ("pyformat", "named"):
                self.parameters = {"value": value}
            else:
                self.parameters = (value,)

    def __call__(self, connection: Any) -> bool:
        cursor = connection.cursor()
        try:
            if self.parameters:
                cursor.execute(self.sql, self.parameters)
            else:
                cursor.execute(self.sql)
            row = cursor.fetchone()
        finally:
            cursor.close()
        return bool(row and row[0])

    def __repr__(self) -> str:
        return f"ExistsQuery({self.sql!r})"
