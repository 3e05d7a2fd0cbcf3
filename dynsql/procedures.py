"""Stored procedure helpers mixed into :class:`dynsql.driver.Database`.

Every helper builds ``EXEC <name> ?,?,...`` with one placeholder per
argument and hands it to the matching primitive on the database.
"""

from typing import TYPE_CHECKING, Any, Optional

from dynsql.exceptions import NotFoundError
from dynsql.utils.logging import get_logger

if TYPE_CHECKING:
    from dynsql.driver import ExecResult, Row

__all__ = ("PROC_STATUS_FAILED", "ProcedureMixin")

logger = get_logger("procedures")

# Status returned by ``proc_status`` when the status row cannot be read.
PROC_STATUS_FAILED = -99


class ProcedureMixin:
    """Stored procedure calls on top of ``exec``/``query``/``select`` primitives."""

    __slots__ = ()

    if TYPE_CHECKING:

        def exec(self, sql: str, *args: Any) -> ExecResult: ...
        def query(self, sql: str, *args: Any) -> Any: ...
        def query_row(self, sql: str, *args: Any) -> Row: ...
        def select(self, sql: str, *args: Any) -> list[dict[str, Any]]: ...
        def select_one(self, sql: str, *args: Any) -> Optional[dict[str, Any]]: ...

    @staticmethod
    def proc_placeholder(count: int) -> str:
        """Return ``count`` comma separated ``?`` markers."""
        return ",".join("?" * count)

    def _proc_sql(self, procname: str, count: int) -> str:
        return f"EXEC {procname} {self.proc_placeholder(count)}"

    def exec_proc(self, procname: str, *params: Any) -> int:
        """Run a procedure.

        Returns:
            The last inserted id when the driver reports one, otherwise the
            number of affected rows.
        """
        result = self.exec(self._proc_sql(procname, len(params)), *params)
        affected = result.rows_affected()
        try:
            return result.last_insert_id()
        except NotFoundError:
            return affected

    def get_exec_proc_error(self, procname: str, *params: Any) -> Optional[Exception]:
        """Run a procedure and return the error it raised, if any."""
        try:
            self.exec_proc(procname, *params)
        except Exception as exc:  # noqa: BLE001
            return exc
        return None

    def proc_query(self, procname: str, *params: Any) -> Any:
        return self.query(self._proc_sql(procname, len(params)), *params)

    def proc_query_row(self, procname: str, *params: Any) -> "Row":
        return self.query_row(self._proc_sql(procname, len(params)), *params)

    def proc_status(self, procname: str, *params: Any) -> tuple[int, str]:
        """Run a procedure that answers with a ``(status, message)`` row.

        Returns:
            The status and message, or ``(-99, <error text>)`` when the row
            cannot be read.
        """
        try:
            status, message = self.proc_query_row(procname, *params).scan(2)
            return int(status), str(message)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Procedure %s returned no readable status: %s", procname, exc)
            return PROC_STATUS_FAILED, str(exc)

    def proc_select(self, procname: str, *params: Any) -> list[dict[str, Any]]:
        return self.select(self._proc_sql(procname, len(params)), *params)

    def proc_select_one(self, procname: str, *params: Any) -> Optional[dict[str, Any]]:
        return self.select_one(self._proc_sql(procname, len(params)), *params)
