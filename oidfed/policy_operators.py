"""The set of operators a metadata policy applies to one parameter."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterator

from oidfed.add import Add
from oidfed.default import Default
from oidfed.essential import Essential
from oidfed.one_of import OneOf
from oidfed.policy_operator import PolicyError, PolicyOperator
from oidfed.subset_of import SubsetOf
from oidfed.superset_of import SupersetOf
from oidfed.value import Value

_OPERATORS: dict[str, type[PolicyOperator]] = {
    cls.name: cls for cls in (Add, Default, Value, Essential, OneOf, SupersetOf, SubsetOf)
}


def parse_policy_operator(key: str, operator_json: Any) -> PolicyOperator:
    """Build the operator named ``key`` from its decoded JSON value."""
    try:
        operator_cls = _OPERATORS[key]
    except KeyError:
        raise PolicyError(f"unknown policy operator: {key}") from None
    try:
        return operator_cls(operator_json)
    except PolicyError as exc:
        raise PolicyError(f"unable to parse '{key}' policy operator: {exc}") from exc


@dataclass
class PolicyOperators:
    """The operators a policy sets for one metadata parameter."""

    operators: list[PolicyOperator] = field(default_factory=list)

    def __iter__(self) -> Iterator[PolicyOperator]:
        return iter(self.operators)

    def __len__(self) -> int:
        return len(self.operators)

    @classmethod
    def from_json(cls, data: Any) -> PolicyOperators:
        """Parse a JSON object (as text, bytes or a decoded dict) of operators.

        Empty input and JSON null give an empty set.
        """
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8")
        if isinstance(data, str):
            text = data.strip()
            if not text or text == "null":
                return cls()
            if not text.startswith("{"):
                raise PolicyError(
                    f"unable to parse {json.dumps(data)} as a valid Metadata Policy"
                )
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                raise PolicyError(
                    f"unable to parse JSON object as map: {exc}"
                ) from exc
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise PolicyError(
                f"unable to parse {json.dumps(data)} as a valid Metadata Policy"
            )

        operators = []
        for key, value in data.items():
            try:
                operators.append(parse_policy_operator(key, value))
            except PolicyError as exc:
                raise PolicyError(f"unable to parse policy operator: {exc}") from exc
        return cls(operators)

    def to_json(self) -> dict[str, Any]:
        """Return the operators as a JSON-ready mapping of name to value."""
        return {op.name: op.operator_value for op in self.operators}