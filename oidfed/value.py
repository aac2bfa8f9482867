"""The ``value`` metadata policy operator."""

from __future__ import annotations

from typing import Any

from oidfed.policy_operator import Contains, PolicyError, PolicyOperator, split_scope


class Value(PolicyOperator):
    """Forces a metadata parameter to a fixed value."""

    name = "value"
    resolution_hierarchy = 0

    def __init__(self, operator_value: Any) -> None:
        self._operator_value = operator_value

    def to_slice(self, key: str) -> Value:
        if isinstance(self._operator_value, (list, tuple)):
            return self
        if key == "scope":
            return Value(split_scope(self._operator_value))
        return Value([self._operator_value])

    def resolve(self, metadata_parameter_value: Any) -> Any:
        if self._operator_value is None:
            return None
        if metadata_parameter_value is None:
            return self._operator_value
        if self._kind(metadata_parameter_value) != self._kind(self._operator_value):
            raise PolicyError(
                "type mismatch: metadata parameter value is of type "
                f"{type(metadata_parameter_value).__name__}, but operator value "
                f"is of type {type(self._operator_value).__name__}"
            )
        return self._operator_value

    def merge(self, value_to_merge: Any) -> Value:
        if self._deep_equal(self._operator_value, value_to_merge):
            return self
        raise PolicyError(
            f"merging {self._describe(self._operator_value)} and "
            f"{self._describe(value_to_merge)} not possible"
        )

    def check_for_conflict(self, contains: Contains) -> None:
        value = self._operator_value
        is_array = isinstance(value, (list, tuple))

        add = contains("add")
        if add is not None:
            if not is_array:
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type 'add' "
                    "if the value of 'value' is not an array"
                )
            if not all(self._contains(value, v) for v in add.operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type 'add' "
                    "unless the contents of `add` is a subset of that in 'value'"
                )

        if contains("default") is not None and value is None:
            raise PolicyError(
                "cannot merge policy of type 'value' with policy of type 'default' "
                "if the value of 'value' is null"
            )

        one_of = contains("one_of")
        if one_of is not None:
            if is_array:
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type 'one_of' "
                    "if the contents of 'value' is an array"
                )
            if not self._contains(one_of.operator_value, value):
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type 'one_of' "
                    "unless the value of 'value' is contained within `one_of`"
                )

        subset_of = contains("subset_of")
        if subset_of is not None:
            if not is_array:
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type "
                    "'subset_of' unless the contents of 'value' is an array"
                )
            if not all(self._contains(subset_of.operator_value, v) for v in value):
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type "
                    "'subset_of' unless the contents of `value` is a subset of that "
                    "in 'subset_of'"
                )

        superset_of = contains("superset_of")
        if superset_of is not None:
            if not is_array:
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type "
                    "'superset_of' unless the contents of 'value' is an array"
                )
            if not all(self._contains(value, v) for v in superset_of.operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'value' with policy of type "
                    "'superset_of' unless the contents of `value` is a superset of "
                    "that in 'superset_of'"
                )

        essential = contains("essential")
        if essential is not None and value is None and essential.operator_value:
            raise PolicyError(
                "cannot merge policy of type 'value' with policy of type 'essential' "
                "if the value of 'value' is null and 'essential' is true"
            )