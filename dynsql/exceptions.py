from enum import Enum, auto
from typing import Any, Optional

__all__ = (
    "DynSQLError",
    "ImproperConfigurationError",
    "MissingTableError",
    "MissingValuesError",
    "NotFoundError",
    "ParameterError",
    "QueryError",
    "RepositoryError",
    "RiskLevel",
    "SQLBuilderError",
    "SQLValidationError",
    "UnsafeBulkDeleteError",
    "UnsafeBulkUpdateError",
    "UnsafeSQLError",
    "UnsupportedArgumentTypeError",
)


class DynSQLError(Exception):
    """Base exception class from which all dynsql exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``DynSQLError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class SQLBuilderError(DynSQLError):
    """Issues building or generating SQL statements."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues building SQL statement."
        super().__init__(message)


class MissingTableError(SQLBuilderError):
    """Raised when a statement that needs a target table has none."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "table cannot be empty")


class MissingValuesError(SQLBuilderError):
    """Raised when a statement that writes values has none to write."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "values cannot be empty")


# -- SQL Validation Errors --
class RiskLevel(Enum):
    """SQL risk assessment levels."""

    MEDIUM = auto()
    HIGH = auto()

    def __str__(self) -> str:
        """String representation.

        Returns:
            Lowercase name of the level.
        """
        return self.name.lower()


class SQLValidationError(DynSQLError):
    """Base class for SQL validation errors."""

    sql: Optional[str]
    risk_level: RiskLevel

    def __init__(self, message: str, sql: Optional[str] = None, risk_level: RiskLevel = RiskLevel.MEDIUM) -> None:
        """Initialize with SQL context and risk level."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql
        self.risk_level = risk_level


class UnsafeSQLError(SQLValidationError):
    """Raised when unsafe SQL constructs are detected."""

    construct: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None, construct: Optional[str] = None) -> None:
        """Initialize with unsafe construct context."""
        detail_message = message
        if construct:
            detail_message = f"{message} (Construct: {construct})"
        super().__init__(detail_message, sql, RiskLevel.HIGH)
        self.construct = construct


class UnsafeBulkDeleteError(UnsafeSQLError):
    """Raised when a DELETE without a WHERE clause is compiled without the unsafe override."""

    def __init__(self, table: Optional[str] = None) -> None:
        super().__init__("deleting all data is not safe", construct=f"DELETE {table}" if table else "DELETE")
        self.table = table


class UnsafeBulkUpdateError(UnsafeSQLError):
    """Raised when an UPDATE without a WHERE clause is compiled without the unsafe override."""

    def __init__(self, table: Optional[str] = None) -> None:
        super().__init__("updating all data is not safe", construct=f"UPDATE {table}" if table else "UPDATE")
        self.table = table


# -- SQL Query Errors --
class QueryError(DynSQLError):
    """Base class for Query errors."""


# -- SQL Parameter Errors --
class ParameterError(DynSQLError):
    """Base class for parameter-related errors."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message} (sql: {sql})"
        super().__init__(detail=detail_message)
        self.sql = sql


class UnsupportedArgumentTypeError(ParameterError):
    """Raised when an argument cannot be rendered as a SQL literal."""

    value: Any
    value_type: type

    def __init__(self, value: Any, sql: Optional[str] = None) -> None:
        self.value = value
        self.value_type = type(value)
        super().__init__(f"invalid sql argument type: {self.value_type.__qualname__} => {value!r}", sql)


class ImproperConfigurationError(DynSQLError):
    """Improper Configuration error.

    Raised for unknown dialects and for builders that need a database but have none.
    """


class RepositoryError(DynSQLError):
    """Base repository exception type."""


class NotFoundError(RepositoryError):
    """An identity does not exist."""
