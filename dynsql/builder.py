"""Fluent SQL statement builder.

A :class:`StatementBuilder` accumulates table, filter, ordering and value state
and compiles it into SQL with ``?`` placeholders plus the positional
arguments for them. Builders are single use and not thread safe; create one
per statement.

Example:
    >>> values = ValueSet(name="alice", score=Increment(5))
    >>> sb = update().table("users").values(values).where("id=?")
    >>> sb.to_sql()
    'UPDATE users SET `name`=?,`score`=score+5 WHERE id=?'
    >>> sb.arguments
    ['alice']
"""

import logging
from collections.abc import Mapping
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

from dynsql.config import DEFAULT_STATEMENT_CONFIG, StatementConfig
from dynsql.exceptions import (
    DynSQLError,
    ImproperConfigurationError,
    MissingTableError,
    MissingValuesError,
    NotFoundError,
    UnsafeBulkDeleteError,
    UnsafeBulkUpdateError,
)
from dynsql.literals import full_sql
from dynsql.result import CompiledStatement, ExecutionResult
from dynsql.utils.logging import get_logger, log_with_context
from dynsql.values import Increment, ValueSet

if TYPE_CHECKING:
    from dynsql.driver import Database, Row

__all__ = (
    "StatementBuilder",
    "StatementKind",
    "delete",
    "insert",
    "insert_or_update",
    "select",
    "update",
)

logger = get_logger("builder")


class StatementKind(Enum):
    """Statement kinds; each selects a compilation strategy."""

    INSERT = auto()
    DELETE = auto()
    UPDATE = auto()
    SELECT = auto()
    INSERT_OR_UPDATE = auto()


class StatementBuilder:
    """Builder for a single INSERT, DELETE, UPDATE, SELECT or upsert statement.

    Use the module level factories (:func:`insert`, :func:`select` ...) or the
    ones on :class:`dynsql.driver.Database` rather than instantiating this
    class directly.
    """

    __slots__ = (
        "_arguments",
        "_config",
        "_database",
        "_debug",
        "_fields",
        "_full_sql",
        "_group",
        "_ignore",
        "_limit",
        "_order",
        "_table",
        "_unsafe",
        "_update_values",
        "_values",
        "_where",
        "kind",
    )

    def __init__(
        self,
        kind: StatementKind,
        *,
        fields: str = "*",
        ignore: bool = False,
        database: "Optional[Database]" = None,
        config: Optional[StatementConfig] = None,
    ) -> None:
        self.kind = kind
        self._database = database
        self._config = config
        self._fields = fields
        self._table = ""
        self._where = ""
        self._group = ""
        self._order = ""
        self._limit = ""
        self._values = ValueSet()
        self._update_values = ValueSet()
        self._ignore = ignore
        self._full_sql = False
        self._debug = False
        self._unsafe = False
        self._arguments: list[Any] = []

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.kind.name} table={self._table!r}>"

    @property
    def config(self) -> StatementConfig:
        """The builder's config, else its database's, else the default."""
        if self._config is not None:
            return self._config
        if self._database is not None:
            return self._database.config
        return DEFAULT_STATEMENT_CONFIG

    @property
    def database(self) -> "Optional[Database]":
        return self._database

    @property
    def arguments(self) -> list[Any]:
        """Positional arguments produced by the last compile."""
        return list(self._arguments)

    def get_args(self) -> list[Any]:
        return self.arguments

    # -- configuration ------------------------------------------------------

    def using(self, database: "Database") -> "StatementBuilder":
        self._database = database
        return self

    def with_config(self, config: StatementConfig) -> "StatementBuilder":
        self._config = config
        return self

    def from_(self, table: str) -> "StatementBuilder":
        self._table = table
        return self

    def table(self, table: str) -> "StatementBuilder":
        return self.from_(table)

    def where(self, clause: str) -> "StatementBuilder":
        self._where = clause
        return self

    def group_by(self, clause: str) -> "StatementBuilder":
        self._group = clause
        return self

    def order_by(self, clause: str) -> "StatementBuilder":
        self._order = clause
        return self

    def limit(self, count: int, offset: int = 0) -> "StatementBuilder":
        """Set ``LIMIT offset,count``; only emitted for MySQL-family dialects."""
        self._limit = f"{offset},{count}"
        return self

    def unsafe(self, flag: bool = True) -> "StatementBuilder":
        """Allow DELETE and UPDATE statements without a WHERE clause."""
        self._unsafe = flag
        return self

    def debug(self, flag: bool = True) -> "StatementBuilder":
        self._debug = flag
        return self

    def full_sql(self, flag: bool = True) -> "StatementBuilder":
        """Execute with arguments inlined as literals instead of bound."""
        self._full_sql = flag
        return self

    def values(self, values: Mapping[str, Any]) -> "StatementBuilder":
        self._values = values if isinstance(values, ValueSet) else ValueSet(values)
        return self

    def update_values(self, values: Mapping[str, Any]) -> "StatementBuilder":
        """Set the assignments of the ON DUPLICATE KEY UPDATE clause."""
        self._update_values = values if isinstance(values, ValueSet) else ValueSet(values)
        return self

    def add_value(self, key: str, value: Any) -> "StatementBuilder":
        self._values.add(key, value)
        return self

    def add_update_value(self, key: str, value: Any) -> "StatementBuilder":
        self._update_values.add(key, value)
        return self

    # -- compilation --------------------------------------------------------

    def to_sql(self, render_literal: bool = False) -> str:
        """Compile the statement.

        Args:
            render_literal: Inline the arguments as SQL literals.

        Raises:
            MissingTableError: INSERT without a table.
            MissingValuesError: INSERT, UPDATE or upsert without values.
            UnsafeBulkDeleteError: DELETE without WHERE and without :meth:`unsafe`.
            UnsafeBulkUpdateError: UPDATE without WHERE and without :meth:`unsafe`.
            UnsupportedArgumentTypeError: ``render_literal`` met an argument
                without a literal form.

        Returns:
            The SQL text. DELETE, UPDATE and upsert builders without a table
            compile to an empty string.
        """
        self._arguments = []
        compilers = {
            StatementKind.INSERT: self._compile_insert,
            StatementKind.DELETE: self._compile_delete,
            StatementKind.UPDATE: self._compile_update,
            StatementKind.INSERT_OR_UPDATE: self._compile_insert_or_update,
            StatementKind.SELECT: self._compile_select,
        }
        sql = compilers[self.kind]()
        if render_literal:
            sql = full_sql(sql, *self._arguments, placeholder=self.config.placeholder)
        return sql

    def build(self) -> CompiledStatement:
        sql = self.to_sql()
        return CompiledStatement(sql, tuple(self._arguments))

    def _insert_clause(self, values: ValueSet, unwrap_increments: bool) -> str:
        config = self.config
        fields = []
        for key, value in values.items():
            fields.append(config.quote_identifier(key))
            if unwrap_increments and isinstance(value, Increment):
                self._arguments.append(value.delta)
            else:
                self._arguments.append(value)
        placeholders = ",".join([config.placeholder] * len(fields))
        return f"({','.join(fields)}) VALUES ({placeholders})"

    def _assignments(self, values: ValueSet) -> str:
        config = self.config
        assignments = []
        for key, value in values.items():
            if isinstance(value, Increment):
                assignments.append(f"{config.quote_identifier(key)}={value.expression(key)}")
            else:
                assignments.append(f"{config.quote_identifier(key)}={config.placeholder}")
                self._arguments.append(value)
        return ",".join(assignments)

    def _compile_insert(self) -> str:
        if not self._table:
            raise MissingTableError
        if not self._values:
            raise MissingValuesError
        verb = "INSERT IGNORE INTO" if self._ignore else "INSERT INTO"
        return f"{verb} {self._table} {self._insert_clause(self._values, unwrap_increments=True)}"

    def _compile_delete(self) -> str:
        if not self._table:
            return ""
        if not self._where and not self._unsafe:
            raise UnsafeBulkDeleteError(self._table)
        sql = f"DELETE {self._table} FROM {self._table}"
        if self._where:
            sql += f" WHERE {self._where}"
        return sql

    def _compile_update(self) -> str:
        if not self._table:
            return ""
        if not self._where and not self._unsafe:
            raise UnsafeBulkUpdateError(self._table)
        if not self._values:
            raise MissingValuesError
        sql = f"UPDATE {self._table} SET {self._assignments(self._values)}"
        if self._where:
            sql += f" WHERE {self._where}"
        return sql

    def _compile_insert_or_update(self) -> str:
        if not self._table:
            return ""
        if not self._values:
            raise MissingValuesError
        if not self._update_values:
            raise MissingValuesError("update values cannot be empty")
        insert_clause = self._insert_clause(self._values, unwrap_increments=False)
        return (
            f"INSERT INTO {self._table} {insert_clause} "
            f"ON DUPLICATE KEY UPDATE {self._assignments(self._update_values)}"
        )

    def _compile_select(self) -> str:
        sql = f"SELECT {self._fields}"
        if self._table:
            sql += f" FROM {self._table}"
        if self._where:
            sql += f" WHERE {self._where}"
        if self._group:
            sql += f" GROUP BY {self._group}"
        if self._order:
            sql += f" ORDER BY {self._order}"
        if self._limit and self.config.is_mysql_family:
            sql += f" LIMIT {self._limit}"
        return sql

    # -- execution ----------------------------------------------------------

    def _require_database(self) -> "Database":
        if self._database is None:
            msg = f"{self.kind.name} statement has no database to run against"
            raise ImproperConfigurationError(msg)
        return self._database

    def _log_statement(self, sql: str, params: tuple[Any, ...]) -> None:
        if self._debug:
            log_with_context(
                logger,
                logging.INFO,
                "SQL prepare statement",
                sql=sql,
                arguments=list(self._arguments),
                parameters=list(params),
            )

    def exec(self, *params: Any) -> ExecutionResult:
        """Run an INSERT, DELETE, UPDATE or upsert statement.

        ``params`` are appended after the compiled value arguments, which is
        how placeholders inside :meth:`where` get their values.

        Returns:
            The outcome. Compile, render and driver failures are reported
            through ``success``/``message`` rather than raised.
        """
        try:
            sql = self.to_sql()
        except DynSQLError as exc:
            logger.warning("Statement compilation failed: %s", exc)
            return ExecutionResult.failed(str(exc))

        self._log_statement(sql, params)
        arguments = (*self._arguments, *params)
        try:
            database = self._require_database()
            if self._full_sql:
                cursor_result = database.exec(full_sql(sql, *arguments, placeholder=self.config.placeholder))
            else:
                cursor_result = database.exec(sql, *arguments)
        except Exception as exc:
            logger.warning("Statement execution failed: %s", exc, extra={"extra_fields": {"sql": sql}})
            return ExecutionResult.failed(str(exc), sql=sql, code=_error_code(exc))

        last_insert_id = 0
        rows_affected = 0
        try:
            if self.kind is StatementKind.INSERT and self.config.is_mysql_family:
                last_insert_id = cursor_result.last_insert_id()
            elif self.kind in {StatementKind.DELETE, StatementKind.UPDATE, StatementKind.INSERT_OR_UPDATE}:
                rows_affected = cursor_result.rows_affected()
        except NotFoundError:
            logger.debug("Driver did not report a row id or row count for %s", self.kind.name)
        return ExecutionResult.succeeded(sql, last_insert_id=last_insert_id, rows_affected=rows_affected)

    def query(self, *params: Any) -> list[dict[str, Any]]:
        """Run the statement and return every row as a dict."""
        sql = self.to_sql()
        self._log_statement(sql, params)
        return self._require_database().select(sql, *params)

    def query_one(self, *params: Any) -> Optional[dict[str, Any]]:
        """Run the statement limited to one row and return it, or ``None``."""
        self.limit(1, 0)
        sql = self.to_sql()
        self._log_statement(sql, params)
        return self._require_database().select_one(sql, *params)

    def query_all_rows(self, *params: Any) -> Any:
        """Run the statement and return the open DB-API cursor."""
        sql = self.to_sql()
        self._log_statement(sql, params)
        return self._require_database().query(sql, *params)

    def query_row(self, *params: Any) -> "Row":
        sql = self.to_sql()
        self._log_statement(sql, params)
        return self._require_database().query_row(sql, *params)


def _error_code(exc: BaseException) -> int:
    """Best effort driver error code (``errno`` attribute or leading int arg)."""
    code = getattr(exc, "errno", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    code = getattr(exc, "sqlite_errorcode", None)
    if isinstance(code, int):
        return code
    if exc.args and isinstance(exc.args[0], int) and not isinstance(exc.args[0], bool):
        return exc.args[0]
    return 0


def insert(
    ignore: bool = False, *, database: "Optional[Database]" = None, config: Optional[StatementConfig] = None
) -> StatementBuilder:
    """Start an ``INSERT [IGNORE] INTO`` statement."""
    return StatementBuilder(StatementKind.INSERT, ignore=ignore, database=database, config=config)


def delete(*, database: "Optional[Database]" = None, config: Optional[StatementConfig] = None) -> StatementBuilder:
    return StatementBuilder(StatementKind.DELETE, database=database, config=config)


def update(*, database: "Optional[Database]" = None, config: Optional[StatementConfig] = None) -> StatementBuilder:
    return StatementBuilder(StatementKind.UPDATE, database=database, config=config)


def insert_or_update(
    *, database: "Optional[Database]" = None, config: Optional[StatementConfig] = None
) -> StatementBuilder:
    """Start an ``INSERT ... ON DUPLICATE KEY UPDATE`` statement (MySQL family only)."""
    return StatementBuilder(StatementKind.INSERT_OR_UPDATE, database=database, config=config)


def select(
    fields: str = "*", *, database: "Optional[Database]" = None, config: Optional[StatementConfig] = None
) -> StatementBuilder:
    return StatementBuilder(StatementKind.SELECT, fields=fields, database=database, config=config)
