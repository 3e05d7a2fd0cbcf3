"""DB-API execution collaborator.

:class:`Database` runs the SQL produced by the builders on any DB-API 2.0
connection. Transactions stay with the caller: nothing here commits or rolls
back.
"""

from typing import Any, Optional, Union

from dynsql.builder import StatementBuilder, delete, insert, insert_or_update, select, update
from dynsql.config import DEFAULT_STATEMENT_CONFIG, StatementConfig
from dynsql.exceptions import NotFoundError, QueryError
from dynsql.parameters import ParameterStyle, convert_placeholders
from dynsql.procedures import ProcedureMixin
from dynsql.utils.logging import get_logger

__all__ = ("Database", "ExecResult", "Row")

logger = get_logger("driver")


class ExecResult:
    """Row id and row count reported by the cursor of an ``exec`` call."""

    __slots__ = ("_last_insert_id", "_rows_affected")

    def __init__(self, last_insert_id: Optional[int], rows_affected: Optional[int]) -> None:
        self._last_insert_id = last_insert_id
        self._rows_affected = rows_affected

    def __repr__(self) -> str:
        return f"ExecResult(last_insert_id={self._last_insert_id!r}, rows_affected={self._rows_affected!r})"

    def last_insert_id(self) -> int:
        """Return the generated row id.

        Raises:
            NotFoundError: If the driver did not report one.
        """
        if self._last_insert_id is None:
            msg = "driver did not report a last insert id"
            raise NotFoundError(msg)
        return int(self._last_insert_id)

    def rows_affected(self) -> int:
        """Return the affected row count.

        Raises:
            NotFoundError: If the driver reported ``-1`` or nothing.
        """
        if self._rows_affected is None or self._rows_affected < 0:
            msg = "driver did not report an affected row count"
            raise NotFoundError(msg)
        return int(self._rows_affected)


class Row:
    """First row of a query whose errors surface when it is scanned."""

    __slots__ = ("_columns", "_error", "_values")

    def __init__(
        self,
        values: Optional[tuple[Any, ...]] = None,
        columns: Optional[list[str]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self._values = values
        self._columns = columns or []
        self._error = error

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    def scan(self, count: Optional[int] = None) -> tuple[Any, ...]:
        """Return the row values.

        Args:
            count: Number of columns the caller expects.

        Raises:
            Exception: The error raised while running the query.
            NotFoundError: If the query returned no rows.
            QueryError: If ``count`` does not match the column count.

        Returns:
            The values of the row.
        """
        if self._error is not None:
            raise self._error
        if self._values is None:
            msg = "no rows in result set"
            raise NotFoundError(msg)
        if count is not None and count != len(self._values):
            msg = f"expected {len(self._values)} destination values, not {count}"
            raise QueryError(msg)
        return self._values

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(self._columns, self.scan()))


def _column_names(cursor: Any) -> list[str]:
    return [column[0] for column in cursor.description or []]


class Database(ProcedureMixin):
    """Execution object over a DB-API 2.0 connection.

    Args:
        connection: An open DB-API connection.
        config: Statement config handed to builders created from this database.
        parameter_style: Placeholder style the driver expects. A DB-API
            ``paramstyle`` string such as ``"format"`` is accepted too.
    """

    __slots__ = ("config", "connection", "parameter_style")

    def __init__(
        self,
        connection: Any,
        config: Optional[StatementConfig] = None,
        parameter_style: Union[ParameterStyle, str] = ParameterStyle.QMARK,
    ) -> None:
        self.connection = connection
        self.config = config or DEFAULT_STATEMENT_CONFIG
        if not isinstance(parameter_style, ParameterStyle):
            parameter_style = ParameterStyle.from_paramstyle(parameter_style)
        self.parameter_style = parameter_style

    def __repr__(self) -> str:
        return f"<Database dialect={self.config.dialect!r} style={self.parameter_style}>"

    def _prepare(self, sql: str) -> str:
        """Rewrite markers for the driver; only used when arguments are bound."""
        return convert_placeholders(sql, self.parameter_style, self.config.dialect)

    def _execute(self, sql: str, args: tuple[Any, ...]) -> Any:
        cursor = self.connection.cursor()
        try:
            if args:
                cursor.execute(self._prepare(sql), args)
            else:
                # without parameters the driver sends the text verbatim
                cursor.execute(sql)
        except Exception:
            cursor.close()
            raise
        return cursor

    def exec(self, sql: str, *args: Any) -> ExecResult:
        """Run a statement that returns no rows."""
        cursor = self._execute(sql, args)
        try:
            return ExecResult(getattr(cursor, "lastrowid", None), getattr(cursor, "rowcount", None))
        finally:
            cursor.close()

    def query(self, sql: str, *args: Any) -> Any:
        """Run a query and return its open cursor; the caller closes it."""
        return self._execute(sql, args)

    def query_row(self, sql: str, *args: Any) -> Row:
        """Run a query and keep its first row.

        Never raises; execution errors are re-raised by :meth:`Row.scan`.
        """
        try:
            cursor = self._execute(sql, args)
        except Exception as exc:  # noqa: BLE001
            logger.debug("query_row deferred error: %s", exc)
            return Row(error=exc)
        try:
            values = cursor.fetchone()
            return Row(tuple(values) if values is not None else None, _column_names(cursor))
        except Exception as exc:  # noqa: BLE001
            return Row(error=exc)
        finally:
            cursor.close()

    def select(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """Run a query and return every row as a column name keyed dict."""
        cursor = self._execute(sql, args)
        try:
            columns = _column_names(cursor)
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def select_one(self, sql: str, *args: Any) -> Optional[dict[str, Any]]:
        """Run a query and return its first row as a dict, or ``None``."""
        cursor = self._execute(sql, args)
        try:
            row = cursor.fetchone()
            if row is None:
                return None
            return dict(zip(_column_names(cursor), row))
        finally:
            cursor.close()

    # -- builders bound to this database -------------------------------------

    def insert(self, ignore: bool = False) -> StatementBuilder:
        return insert(ignore, database=self)

    def delete(self) -> StatementBuilder:
        return delete(database=self)

    def update(self) -> StatementBuilder:
        return update(database=self)

    def insert_or_update(self) -> StatementBuilder:
        return insert_or_update(database=self)

    def select_builder(self, fields: str = "*") -> StatementBuilder:
        """Start a SELECT bound to this database.

        Named ``select_builder`` because :meth:`select` runs raw SQL.
        """
        return select(fields, database=self)
