"""Value containers handed to statement builders.

:class:`ValueSet` maps field names to the values written by INSERT, UPDATE and
INSERT ... ON DUPLICATE KEY UPDATE statements. Its typed getters never raise:
a missing key or a value of the wrong type yields the type's zero value. Use
:meth:`ValueSet.lookup` when absence has to be told apart from a zero.
"""

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Union

from typing_extensions import TypeAlias

from dynsql.exceptions import ParameterError

__all__ = ("INT64_MAX", "INT64_MIN", "Increment", "SQLValue", "ValueSet", "new_values")

T = TypeVar("T")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Increment:
    """Set a field to ``base_field + delta``.

    An empty ``base_field`` refers to the field being assigned, so
    ``Increment(5)`` on ``score`` renders ``score+5``.
    """

    delta: int
    base_field: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.delta, bool) or not isinstance(self.delta, int):
            msg = f"increment delta must be an int, not {type(self.delta).__name__}"
            raise ParameterError(msg)
        if not INT64_MIN <= self.delta <= INT64_MAX:
            msg = f"increment delta {self.delta} is outside the signed 64-bit range"
            raise ParameterError(msg)

    def expression(self, field: str) -> str:
        base = self.base_field or field
        if self.delta >= 0:
            return f"{base}+{self.delta}"
        # the sign is already part of the rendered delta
        return f"{base}{self.delta}"


SQLValue: TypeAlias = Union[None, bool, int, float, str, Increment]


class ValueSet(MutableMapping[str, Any]):
    """Field name to value mapping; iteration follows insertion order."""

    __slots__ = ("_data",)

    def __init__(self, initial: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._data: dict[str, Any] = {}
        if initial:
            self._data.update(initial)
        if kwargs:
            self._data.update(kwargs)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data!r})"

    def add(self, key: str, value: Any) -> "ValueSet":
        """Set ``key`` to ``value``, replacing any previous value."""
        self._data[key] = value
        return self

    def delete(self, key: str) -> "ValueSet":
        self._data.pop(key, None)
        return self

    def exists(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def lookup(self, key: str, expected_type: "type[T]") -> Optional[T]:
        """Return the value only when it exists and is an ``expected_type``.

        ``bool`` values are not accepted where ``int`` is expected.

        Args:
            key: Field name.
            expected_type: Required type of the stored value.

        Returns:
            The stored value, or ``None`` when absent or of another type.
        """
        value = self._data.get(key)
        if not isinstance(value, expected_type):
            return None
        if expected_type is int and isinstance(value, bool):
            return None
        return value

    def get_string(self, key: str) -> str:
        value = self.lookup(key, str)
        return "" if value is None else value

    def get_int(self, key: str) -> int:
        value = self.lookup(key, int)
        return 0 if value is None else value

    def get_int64(self, key: str) -> int:
        value = self.lookup(key, int)
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            return 0
        return value

    def get_uint(self, key: str) -> int:
        value = self.lookup(key, int)
        if value is None or value < 0:
            return 0
        return value

    def copy(self) -> "ValueSet":
        return self.__class__(self._data)


def new_values(initial: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ValueSet:
    """Create an empty (or pre-filled) :class:`ValueSet`."""
    return ValueSet(initial, **kwargs)
