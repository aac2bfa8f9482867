"""The ``essential`` metadata policy operator."""

from __future__ import annotations

from typing import Any

from oidfed.policy_operator import Contains, PolicyError, PolicyOperator


class Essential(PolicyOperator):
    """Requires a metadata parameter to be present when true."""

    name = "essential"
    resolution_hierarchy = 100

    def __init__(self, operator_value: Any) -> None:
        if operator_value is None:
            operator_value = False
        if not isinstance(operator_value, bool):
            raise PolicyError("operator value must be a boolean")
        self._operator_value = operator_value

    def to_slice(self, key: str) -> Essential:
        """A boolean has no list form; the operator is returned unchanged."""
        return self

    def resolve(self, metadata_parameter_value: Any) -> Any:
        # An empty list counts as a provided value.
        if self._operator_value and metadata_parameter_value is None:
            raise PolicyError("property marked as essential and not provided")
        return metadata_parameter_value

    def merge(self, value_to_merge: Any) -> Essential:
        if not isinstance(value_to_merge, bool):
            raise PolicyError("MergePolicyOperators value must be a boolean")
        return Essential(self._operator_value or value_to_merge)

    def check_for_conflict(self, contains: Contains) -> None:
        value = contains("value")
        if value is not None and value.operator_value is None and self._operator_value:
            raise PolicyError(
                "cannot merge policy of type 'essential' with policy of type 'value' "
                "if the value of 'value' is null and 'essential' is true"
            )