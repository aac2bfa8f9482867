"""The ``superset_of`` metadata policy operator."""

from __future__ import annotations

from typing import Any

from oidfed.add import _require_list, union_values
from oidfed.policy_operator import Contains, PolicyError, PolicyOperator


class SupersetOf(PolicyOperator):
    """Requires a list-valued metadata parameter to hold every listed value."""

    name = "superset_of"
    resolution_hierarchy = 25

    def __init__(self, operator_value: Any) -> None:
        self._operator_value = _require_list(operator_value)

    def resolve(self, metadata_parameter_value: Any) -> Any:
        """Return the value unchanged if it holds every required value.

        None passes through, as the parameter is then absent.
        """
        if metadata_parameter_value is None:
            return None
        if not isinstance(metadata_parameter_value, (list, tuple)):
            raise PolicyError("both metadata and operator values must be slices")
        if not all(
            self._contains(metadata_parameter_value, v) for v in self._operator_value
        ):
            raise PolicyError(
                "provided metadata is not a superset of the defined operator values"
            )
        return metadata_parameter_value

    def merge(self, value_to_merge: Any) -> SupersetOf:
        """Join the required values of both operators."""
        if value_to_merge is None:
            return self
        if not isinstance(value_to_merge, (list, tuple)):
            raise PolicyError("input must be a slice")
        if not value_to_merge and not self._operator_value:
            return self
        if value_to_merge and self._operator_value:
            if self._kind(value_to_merge[0]) != self._kind(self._operator_value[0]):
                raise PolicyError(
                    "elements of both slices must be of the same underlying type"
                )
        return SupersetOf(union_values(value_to_merge, self._operator_value))

    def to_slice(self, key: str) -> SupersetOf:
        """The value is already a list, so the operator is returned as it is."""
        return self

    def check_for_conflict(self, contains: Contains) -> None:
        required = self._operator_value

        value = contains("value")
        if value is not None:
            fixed = value.operator_value
            if not isinstance(fixed, (list, tuple)):
                raise PolicyError(
                    "cannot merge policy of type 'superset_of' with policy of type "
                    "'value' unless the value of 'value' is an array"
                )
            if not all(self._contains(fixed, v) for v in required):
                raise PolicyError(
                    "cannot merge policy of type 'superset_of' with policy of type "
                    "'value' unless the contents of `value` is a superset of that "
                    "in 'superset_of'"
                )

        if contains("one_of") is not None:
            raise PolicyError(
                "cannot merge policy of type 'superset_of' with policy of type "
                "'one_of'"
            )

        subset_of = contains("subset_of")
        if subset_of is not None:
            allowed = subset_of.operator_value
            if not all(self._contains(allowed, v) for v in required):
                raise PolicyError(
                    "cannot merge policy of type 'superset_of' with policy of type "
                    "'subset_of' unless the contents of `subset_of` is a superset "
                    "of that in 'superset_of'"
                )