"""Statement configuration.

A :class:`StatementConfig` carries the dialect a statement is compiled for and
the identifier quoting that goes with it. Configs are immutable; use
:meth:`StatementConfig.replace` to derive a variant.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from sqlglot.dialects.dialect import Dialect

from dynsql.exceptions import ImproperConfigurationError

__all__ = ("DEFAULT_DIALECT", "DEFAULT_STATEMENT_CONFIG", "MYSQL_FAMILY", "StatementConfig", "resolve_dialect")

DEFAULT_DIALECT = "mysql"

# Dialect tags that accept LIMIT, ON DUPLICATE KEY UPDATE and report LAST_INSERT_ID.
MYSQL_FAMILY = frozenset({"", "mysql"})


def resolve_dialect(name: Optional[str]) -> Dialect:
    """Look up the sqlglot dialect for ``name``.

    Args:
        name: A sqlglot dialect name. Empty or ``None`` resolves to MySQL.

    Raises:
        ImproperConfigurationError: If sqlglot does not know the dialect.

    Returns:
        The sqlglot dialect instance.
    """
    try:
        return Dialect.get_or_raise(name or DEFAULT_DIALECT)
    except ValueError as exc:
        msg = f"Unknown SQL dialect {name!r}"
        raise ImproperConfigurationError(msg) from exc


@dataclass(frozen=True)
class StatementConfig:
    """Dialect and quoting settings read while compiling a statement.

    Args:
        dialect: sqlglot dialect name. ``""`` means the default MySQL family.
        quote_symbol: Identifier quote placed on both sides of field names.
            ``None`` takes the quote characters from the dialect; ``""``
            disables quoting.
        placeholder: Positional parameter marker emitted by the builder.
    """

    dialect: str = DEFAULT_DIALECT
    quote_symbol: Optional[str] = None
    placeholder: str = "?"
    _quote_start: str = field(init=False, repr=False, compare=False, default="")
    _quote_end: str = field(init=False, repr=False, compare=False, default="")

    def __post_init__(self) -> None:
        if self.dialect is None:
            object.__setattr__(self, "dialect", "")
        if not self.placeholder:
            msg = "placeholder cannot be empty"
            raise ImproperConfigurationError(msg)
        sqlglot_dialect = resolve_dialect(self.dialect)
        if self.quote_symbol is None:
            start, end = sqlglot_dialect.IDENTIFIER_START, sqlglot_dialect.IDENTIFIER_END
        else:
            start = end = self.quote_symbol
        object.__setattr__(self, "_quote_start", start)
        object.__setattr__(self, "_quote_end", end)

    @property
    def is_mysql_family(self) -> bool:
        return self.dialect.lower() in MYSQL_FAMILY

    @property
    def sqlglot_dialect(self) -> Dialect:
        return resolve_dialect(self.dialect)

    def quote_identifier(self, name: str) -> str:
        """Quote a field name, doubling any embedded closing quote.

        Examples:
            >>> StatementConfig().quote_identifier("score")
            '`score`'
            >>> StatementConfig(dialect="postgres").quote_identifier("score")
            '"score"'
            >>> StatementConfig(quote_symbol="").quote_identifier("score")
            'score'
        """
        if not self._quote_start:
            return name
        if self._quote_end:
            name = name.replace(self._quote_end, self._quote_end * 2)
        return f"{self._quote_start}{name}{self._quote_end}"

    def replace(self, **kwargs: Any) -> "StatementConfig":
        """Return a copy with the given attributes changed."""
        return replace(self, **kwargs)


DEFAULT_STATEMENT_CONFIG = StatementConfig()
