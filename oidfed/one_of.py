"""The ``one_of`` metadata policy operator."""

from __future__ import annotations

from typing import Any

from oidfed.add import _require_list
from oidfed.policy_operator import Contains, PolicyError, PolicyOperator


class OneOf(PolicyOperator):
    """Restricts a metadata parameter to one of a list of allowed values."""

    name = "one_of"
    resolution_hierarchy = 15

    def __init__(self, operator_value: Any) -> None:
        self._operator_value = _require_list(operator_value)

    def resolve(self, metadata_parameter_value: Any) -> Any:
        """Return the value if it is allowed; None passes through."""
        if metadata_parameter_value is None:
            return None
        if self._contains(self._operator_value, metadata_parameter_value):
            return metadata_parameter_value
        raise PolicyError(
            f"metadata parameter value {self._describe(metadata_parameter_value)} "
            "is not one of the allowed values"
        )

    def merge(self, value_to_merge: Any) -> OneOf:
        """Keep only the values allowed by both operators."""
        if value_to_merge is None:
            return self
        if not isinstance(value_to_merge, (list, tuple)):
            raise PolicyError("both operator values must be slices")
        intersection = [
            v for v in self._operator_value if self._contains(value_to_merge, v)
        ]
        if not intersection:
            raise PolicyError("intersection of operator values is empty")
        return OneOf(intersection)

    def to_slice(self, key: str) -> OneOf:
        """The value is already a list, so the operator is returned as it is."""
        return self

    def check_for_conflict(self, contains: Contains) -> None:
        value = contains("value")
        if value is not None:
            if isinstance(value.operator_value, (list, tuple)):
                raise PolicyError(
                    "cannot merge policy of type 'one_of' with policy of type "
                    "'value' if the value of 'value' is an array"
                )
            if not self._contains(self._operator_value, value.operator_value):
                raise PolicyError(
                    "cannot merge policy of type 'one_of' with policy of type "
                    "'value' unless the value of 'value' is contained within "
                    "`one_of`"
                )
        for other in ("add", "subset_of", "superset_of"):
            if contains(other) is not None:
                raise PolicyError(
                    "cannot merge policy of type 'one_of' with policy of type "
                    f"'{other}'"
                )