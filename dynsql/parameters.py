"""Positional parameter styles.

Builders always emit ``?`` markers. Drivers that expect another DB-API
paramstyle get the markers rewritten here. The sqlglot tokenizer locates the
markers so a ``?`` inside a string literal or quoted identifier is left alone.
"""

from enum import Enum
from typing import Optional

from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from dynsql.config import resolve_dialect
from dynsql.exceptions import ImproperConfigurationError, ParameterError

__all__ = ("ParameterStyle", "convert_placeholders")


class ParameterStyle(str, Enum):
    """Positional parameter style enumeration with string values."""

    QMARK = "qmark"
    NUMERIC = "numeric"
    POSITIONAL_COLON = "positional_colon"
    POSITIONAL_PYFORMAT = "pyformat_positional"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_paramstyle(cls, paramstyle: str) -> "ParameterStyle":
        """Map a DB-API module ``paramstyle`` attribute to a style.

        Raises:
            ImproperConfigurationError: For named paramstyles, which positional
                builders cannot feed.
        """
        styles = {"qmark": cls.QMARK, "format": cls.POSITIONAL_PYFORMAT, "numeric": cls.POSITIONAL_COLON}
        try:
            return styles[paramstyle]
        except KeyError:
            msg = f"Unsupported DB-API paramstyle {paramstyle!r}; a positional style is required"
            raise ImproperConfigurationError(msg) from None

    def marker(self, position: int) -> str:
        """Placeholder text for the 1-based ``position``."""
        if self is ParameterStyle.NUMERIC:
            return f"${position}"
        if self is ParameterStyle.POSITIONAL_COLON:
            return f":{position}"
        if self is ParameterStyle.POSITIONAL_PYFORMAT:
            return "%s"
        return "?"


def convert_placeholders(sql: str, style: ParameterStyle, dialect: Optional[str] = None) -> str:
    """Rewrite ``?`` markers in ``sql`` to ``style``.

    With the pyformat style every literal ``%`` is doubled so the driver's
    ``%`` interpolation leaves it intact. Drivers only interpolate when
    parameters are passed, so statements executed without arguments must not
    be converted.

    Args:
        sql: Statement using ``?`` markers.
        style: Target parameter style.
        dialect: sqlglot dialect used to tokenize the statement.

    Raises:
        ParameterError: If the statement cannot be tokenized.

    Returns:
        The converted statement.
    """
    if style is ParameterStyle.QMARK or not sql:
        return sql

    try:
        tokens = resolve_dialect(dialect).tokenize(sql)
    except TokenError as exc:
        msg = f"Unable to locate placeholders: {exc}"
        raise ParameterError(msg, sql) from exc

    escape_percent = style is ParameterStyle.POSITIONAL_PYFORMAT
    parts: list[str] = []
    cursor = 0
    position = 0
    for token in tokens:
        if token.token_type != TokenType.PLACEHOLDER or token.text != "?":
            continue
        segment = sql[cursor : token.start]
        parts.append(segment.replace("%", "%%") if escape_percent else segment)
        position += 1
        parts.append(style.marker(position))
        cursor = token.end + 1
    tail = sql[cursor:]
    parts.append(tail.replace("%", "%%") if escape_percent else tail)
    return "".join(parts)
