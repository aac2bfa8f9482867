"""The ``subset_of`` metadata policy operator."""

from __future__ import annotations

from typing import Any

from oidfed.add import _require_list
from oidfed.policy_operator import Contains, PolicyError, PolicyOperator


class SubsetOf(PolicyOperator):
    """Limits a list-valued metadata parameter to the allowed values."""

    name = "subset_of"
    resolution_hierarchy = 20

    def __init__(self, operator_value: Any) -> None:
        self._operator_value = _require_list(operator_value)

    def resolve(self, metadata_parameter_value: Any) -> Any:
        """Drop values that are not allowed; None passes through."""
        if metadata_parameter_value is None:
            return None
        if not isinstance(metadata_parameter_value, (list, tuple)):
            raise PolicyError("both metadata and operator values must be slices")
        return [
            v
            for v in metadata_parameter_value
            if self._contains(self._operator_value, v)
        ]

    def merge(self, value_to_merge: Any) -> SubsetOf:
        """Intersect the allowed values; an empty result is allowed."""
        if not isinstance(value_to_merge, (list, tuple)):
            raise PolicyError("both operator values must be slices")
        return SubsetOf(
            [v for v in self._operator_value if self._contains(value_to_merge, v)]
        )

    def to_slice(self, key: str) -> SubsetOf:
        """The value is already a list, so the operator is returned as it is."""
        return self

    def check_for_conflict(self, contains: Contains) -> None:
        allowed = self._operator_value

        value = contains("value")
        if value is not None:
            if not isinstance(value.operator_value, (list, tuple)):
                raise PolicyError(
                    "cannot merge policy of type 'subset_of' with policy of type "
                    "'value' unless the value of 'value' is an array"
                )
            if not all(self._contains(allowed, v) for v in value.operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'subset_of' with policy of type "
                    "'value' unless the contents of `value` is a subset of that in "
                    "'subset_of'"
                )

        add = contains("add")
        if add is not None:
            if not all(self._contains(allowed, v) for v in add.operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'subset_of' with policy of type "
                    "'add' unless the contents of `add` is a subset of that in "
                    "'subset_of'"
                )

        if contains("one_of") is not None:
            raise PolicyError(
                "cannot merge policy of type 'subset_of' with policy of type 'one_of'"
            )

        superset_of = contains("superset_of")
        if superset_of is not None:
            if not all(self._contains(allowed, v) for v in superset_of.operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'subset_of' with policy of type "
                    "'superset_of' unless the contents of `superset_of` is a "
                    "superset of that in 'subset_of'"
                )