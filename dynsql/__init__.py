"""dynsql: dynamic SQL statement builder."""

from dynsql import exceptions
from dynsql.builder import StatementBuilder, StatementKind, delete, insert, insert_or_update, select, update
from dynsql.config import DEFAULT_STATEMENT_CONFIG, StatementConfig
from dynsql.driver import Database, ExecResult, Row
from dynsql.literals import full_sql, render_literal
from dynsql.parameters import ParameterStyle, convert_placeholders
from dynsql.result import CompiledStatement, ExecutionResult
from dynsql.values import Increment, SQLValue, ValueSet, new_values

SB = StatementBuilder

__all__ = (
    "DEFAULT_STATEMENT_CONFIG",
    "SB",
    "CompiledStatement",
    "Database",
    "ExecResult",
    "ExecutionResult",
    "Increment",
    "ParameterStyle",
    "Row",
    "SQLValue",
    "StatementBuilder",
    "StatementConfig",
    "StatementKind",
    "ValueSet",
    "convert_placeholders",
    "delete",
    "exceptions",
    "full_sql",
    "insert",
    "insert_or_update",
    "new_values",
    "render_literal",
    "select",
    "update",
)
