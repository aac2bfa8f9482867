"""The ``default`` metadata policy operator."""

from __future__ import annotations

from typing import Any

from oidfed.policy_operator import Contains, PolicyError, PolicyOperator, split_scope


class Default(PolicyOperator):
    """Supplies a value when a metadata parameter is absent."""

    name = "default"
    resolution_hierarchy = 10

    def __init__(self, operator_value: Any) -> None:
        if operator_value is None:
            raise PolicyError("operator value cannot be nil")
        self._operator_value = operator_value

    def to_slice(self, key: str) -> Default:
        if isinstance(self._operator_value, (list, tuple)):
            return self
        if key == "scope":
            return Default(split_scope(self._operator_value))
        return Default([self._operator_value])

    def resolve(self, metadata_parameter_value: Any) -> Any:
        # An empty list counts as a value and is kept.
        if metadata_parameter_value is None:
            return self._operator_value
        return metadata_parameter_value

    def merge(self, value_to_merge: Any) -> Default:
        if self._deep_equal(self._operator_value, value_to_merge):
            return self
        raise PolicyError(
            f"merging {self._describe(self._operator_value)} and "
            f"{self._describe(value_to_merge)} not possible"
        )

    def check_for_conflict(self, contains: Contains) -> None:
        value = contains("value")
        if value is not None and value.operator_value is None:
            raise PolicyError(
                "cannot merge policy of type 'default' with policy of type 'value' "
                "if the value of 'value' is null"
            )