"""Render driver arguments as inline SQL literals.

Used for debug output and for executing statements with their arguments
inlined. String handling strips single quotes instead of escaping them, which
changes the stored text and is not an injection defence on every dialect;
prefer parameterized execution for untrusted input.
"""

import math
from decimal import Decimal
from typing import Any, Callable, Optional

from dynsql.exceptions import UnsupportedArgumentTypeError

__all__ = ("LiteralRenderers", "full_sql", "render_literal")

Renderer = Callable[[Any], str]


def _render_int(value: int) -> str:
    return str(int(value))


def _render_float(value: float) -> str:
    return format(Decimal(repr(value)), "f")


def _render_bool(value: bool) -> str:
    return "true" if value else "false"


def _render_str(value: str) -> str:
    return "'" + value.replace("'", "").replace("\\", "\\\\") + "'"


def _render_none(value: None) -> str:
    return "NULL"


class LiteralRenderers:
    """Type to renderer lookup with MRO resolution and a per-type cache."""

    __slots__ = ("_cache", "_registry")

    def __init__(self) -> None:
        self._cache: dict[type, Renderer] = {}
        self._registry: dict[type, Renderer] = {}

    def register(self, type_: type, renderer: Renderer) -> None:
        self._registry[type_] = renderer
        self._cache.clear()

    def get(self, value: Any) -> Optional[Renderer]:
        value_type = type(value)
        if value_type in self._cache:
            return self._cache[value_type]
        for base in value_type.__mro__:
            if base in self._registry:
                renderer = self._registry[base]
                self._cache[value_type] = renderer
                return renderer
        return None


default_renderers = LiteralRenderers()
# bool is looked up before int through its own MRO entry
default_renderers.register(bool, _render_bool)
default_renderers.register(int, _render_int)
default_renderers.register(float, _render_float)
default_renderers.register(str, _render_str)
default_renderers.register(type(None), _render_none)


def render_literal(value: Any, sql: Optional[str] = None) -> str:
    """Render a single argument as a SQL literal.

    Args:
        value: Argument to render.
        sql: Template the argument belongs to, reported on failure.

    Raises:
        UnsupportedArgumentTypeError: If the type has no literal form, or the
            value is a non-finite float.

    Returns:
        The literal text.
    """
    renderer = default_renderers.get(value)
    # inf and nan have no SQL literal form
    if renderer is None or (isinstance(value, float) and not math.isfinite(value)):
        raise UnsupportedArgumentTypeError(value, sql)
    return renderer(value)


def full_sql(template: str, *args: Any, placeholder: str = "?") -> str:
    """Inline ``args`` into ``template`` in place of its placeholders.

    Placeholders without a matching argument are dropped and surplus arguments
    are ignored.

    Examples:
        >>> full_sql("SELECT * FROM t WHERE id=? AND name=?", 7, "O'Brien")
        "SELECT * FROM t WHERE id=7 AND name='OBrien'"
        >>> full_sql("SELECT 1", 7)
        'SELECT 1'
    """
    if placeholder not in template:
        return template
    fragments = template.split(placeholder)
    parts: list[str] = []
    for index, fragment in enumerate(fragments):
        parts.append(fragment)
        if index < len(fragments) - 1 and index < len(args):
            parts.append(render_literal(args[index], template))
    return "".join(parts)
