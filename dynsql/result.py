"""Compiled statements and execution outcomes."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

__all__ = ("CompiledStatement", "ExecutionResult")


@dataclass(frozen=True)
class CompiledStatement:
    """SQL text and the positional arguments bound to its placeholders."""

    sql: str
    arguments: tuple[Any, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Any]:
        # allows ``sql, args = builder.build()``
        yield self.sql
        yield list(self.arguments)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of :meth:`dynsql.builder.StatementBuilder.exec`.

    Failures never raise out of ``exec``; check :attr:`success` instead.

    Args:
        success: Whether the statement compiled and ran.
        code: Driver error code, ``0`` when unknown or on success.
        message: Error text on failure.
        last_insert_id: Generated id, reported for MySQL-family INSERTs only.
        rows_affected: Row count for DELETE, UPDATE and INSERT ... ON DUPLICATE KEY UPDATE.
        sql: The compiled, parameterized SQL.
    """

    success: bool = False
    code: int = 0
    message: str = ""
    last_insert_id: int = 0
    rows_affected: int = 0
    sql: str = ""

    @classmethod
    def failed(cls, message: str, sql: str = "", code: int = 0) -> "ExecutionResult":
        return cls(success=False, code=code, message=message, sql=sql)

    @classmethod
    def succeeded(cls, sql: str, last_insert_id: int = 0, rows_affected: int = 0) -> "ExecutionResult":
        return cls(success=True, sql=sql, last_insert_id=last_insert_id, rows_affected=rows_affected)

    def __bool__(self) -> bool:
        return self.success
