"""The ``add`` metadata policy operator."""

from __future__ import annotations

from typing import Any, Hashable

from oidfed.policy_operator import Contains, PolicyError, PolicyOperator


def is_valid_element(element: Any) -> bool:
    """Tell whether ``element`` may appear in a list the operator combines."""
    if isinstance(element, bool):
        return False
    return isinstance(element, (str, int, float, dict))


def _element_key(element: Any) -> Hashable:
    """A key under which equal elements collide, whatever their key order."""
    if isinstance(element, dict):
        return (
            "map",
            tuple(
                (str(key), PolicyOperator._describe(element[key]))
                for key in sorted(element, key=str)
            ),
        )
    return (PolicyOperator._kind(element), PolicyOperator._describe(element))


def union_values(first: Any, second: Any) -> list:
    """Join two lists, keeping the first occurrence of each element.

    When ``first`` is None, ``second`` is returned as it is.
    """
    if first is None:
        return second
    if not isinstance(first, (list, tuple)) or not isinstance(second, (list, tuple)):
        raise PolicyError("both inputs must be slices")
    if not first and not second:
        return list(first)

    seen: set[Hashable] = set()
    result: list = []
    for label, values in (("first", first), ("second", second)):
        for element in values:
            if not is_valid_element(element):
                raise PolicyError(
                    f"invalid element type in {label} list: "
                    f"{PolicyOperator._describe(element)}"
                )
            key = _element_key(element)
            if key not in seen:
                seen.add(key)
                result.append(element)
    return result


def _require_list(operator_value: Any) -> list:
    if operator_value is None:
        raise PolicyError("operator value cannot be nil")
    if not isinstance(operator_value, (list, tuple)):
        raise PolicyError("operator value must be a slice")
    return list(operator_value)


class Add(PolicyOperator):
    """Adds values to a list-valued metadata parameter."""

    name = "add"
    resolution_hierarchy = 5

    def __init__(self, operator_value: Any) -> None:
        self._operator_value = _require_list(operator_value)

    def resolve(self, metadata_parameter_value: Any) -> Any:
        return union_values(metadata_parameter_value, self._operator_value)

    def merge(self, value_to_merge: Any) -> Add:
        return Add(union_values(value_to_merge, self._operator_value))

    def to_slice(self, key: str) -> Add:
        """The value is already a list, so the operator is returned as it is."""
        return self

    def check_for_conflict(self, contains: Contains) -> None:
        value = contains("value")
        if value is not None:
            allowed = value.operator_value
            if not isinstance(allowed, (list, tuple)):
                raise PolicyError(
                    "cannot merge policy of type 'add' with policy of type 'value' "
                    "if the value of 'value' is not an array"
                )
            if not all(self._contains(allowed, v) for v in self._operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'add' with policy of type 'value' "
                    "unless the contents of `add` is a subset of that in 'value'"
                )

        if contains("one_of") is not None:
            raise PolicyError(
                "cannot merge policy of type 'add' with policy of type 'one_of'"
            )

        subset_of = contains("subset_of")
        if subset_of is not None:
            allowed = subset_of.operator_value
            if not all(self._contains(allowed, v) for v in self._operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'add' with policy of type "
                    "'subset_of' unless the contents of `add` is a subset of that "
                    "in 'subset_of'"
                )