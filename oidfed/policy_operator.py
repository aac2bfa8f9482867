"""The common base of metadata policy operators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional


class PolicyError(ValueError):
    """Raised when a policy cannot be built, merged or applied."""


#: Looks up an operator in the same policy set by its name.
Contains = Callable[[str], Optional[Any]]


def split_scope(value: object) -> list[str]:
    """Split a space separated ``scope`` string into its values."""
    if not isinstance(value, str):
        raise PolicyError("scope must be a string or array of strings")
    return value.split(" ")


class PolicyOperator(ABC):
    """One operator of a metadata policy, such as ``value`` or ``add``."""

    name: ClassVar[str] = ""
    resolution_hierarchy: ClassVar[int] = 0
    _operator_value: Any = None

    @property
    def operator_value(self) -> Any:
        return self._operator_value

    @abstractmethod
    def resolve(self, metadata_parameter_value: Any) -> Any:
        """Apply the operator to a metadata parameter value."""

    @abstractmethod
    def merge(self, value_to_merge: Any) -> PolicyOperator:
        """Combine with the value of an operator of the same kind."""

    def to_slice(self, key: str) -> PolicyOperator:
        """Return a form of this operator whose value is a list."""
        return self

    @abstractmethod
    def check_for_conflict(self, contains: Contains) -> None:
        """Raise PolicyError if this operator clashes with others in its set."""

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._operator_value!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._deep_equal(self._operator_value, other._operator_value)

    __hash__ = None  # type: ignore[assignment]

    @staticmethod
    def _deep_equal(a: Any, b: Any) -> bool:
        if isinstance(a, bool) or isinstance(b, bool):
            return type(a) is bool and type(b) is bool and a == b
        if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
            return (
                isinstance(a, (list, tuple))
                and isinstance(b, (list, tuple))
                and len(a) == len(b)
                and all(PolicyOperator._deep_equal(x, y) for x, y in zip(a, b))
            )
        if isinstance(a, dict) or isinstance(b, dict):
            return (
                isinstance(a, dict)
                and isinstance(b, dict)
                and a.keys() == b.keys()
                and all(PolicyOperator._deep_equal(a[k], b[k]) for k in a)
            )
        return a == b

    @staticmethod
    def _contains(values: Any, item: Any) -> bool:
        return any(PolicyOperator._deep_equal(v, item) for v in values)

    @staticmethod
    def _describe(value: Any) -> str:
        """Render a value for error messages."""
        if value is None:
            return "<nil>"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if value.is_integer() and abs(value) < 1e21:
                return str(int(value))
            return repr(value)
        if isinstance(value, (list, tuple)):
            return "[" + " ".join(PolicyOperator._describe(v) for v in value) + "]"
        if isinstance(value, dict):
            items = " ".join(
                f"{k}:{PolicyOperator._describe(value[k])}" for k in sorted(value)
            )
            return f"map[{items}]"
        return str(value)

    @staticmethod
    def _kind(value: Any) -> str:
        if isinstance(value, bool):
            return "bool"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        if isinstance(value, (list, tuple)):
            return "slice"
        if isinstance(value, dict):
            return "map"
        return type(value).__name__