"""Merging metadata policies along a trust chain and applying them."""

from __future__ import annotations

import copy
from typing import Any, Iterable, Optional, Sequence

from oidfed.add import Add
from oidfed.default import Default
from oidfed.essential import Essential
from oidfed.model import EntityStatement, MetadataPolicy
from oidfed.one_of import OneOf
from oidfed.policy_operator import PolicyError, PolicyOperator, split_scope
from oidfed.policy_operators import PolicyOperators
from oidfed.subset_of import SubsetOf
from oidfed.superset_of import SupersetOf
from oidfed.value import Value

_MERGE_ORDER = (Value, Add, Default, OneOf, SubsetOf, SupersetOf, Essential)

PolicySet = dict[str, PolicyOperators]


def sort_by_priority(policies: Iterable[PolicyOperator]) -> list[PolicyOperator]:
    """Return the operators in the order they are to be applied."""
    return sorted(policies, key=lambda policy: policy.resolution_hierarchy)


def _validate_policies_can_combine(policies: Sequence[PolicyOperator]) -> None:
    def contains(name: str) -> Optional[PolicyOperator]:
        return next((p for p in policies if p.name == name), None)

    for policy in policies:
        policy.check_for_conflict(contains)


def merge_policy_operators(
    claim_name: str,
    policy_set_a: Optional[Iterable[PolicyOperator]],
    policy_set_b: Optional[Iterable[PolicyOperator]],
) -> list[PolicyOperator]:
    """Merge two operator sets for one parameter into one sorted set.

    Raises PolicyError when operators cannot be merged or clash.
    """
    first = list(policy_set_a or ())
    second = list(policy_set_b or ())
    if not first:
        return second
    if not second:
        return first

    by_name_a = {policy.name: policy for policy in first}
    by_name_b = {policy.name: policy for policy in second}

    merged: list[PolicyOperator] = []
    for operator_cls in _MERGE_ORDER:
        a = by_name_a.get(operator_cls.name)
        b = by_name_b.get(operator_cls.name)
        if a is None and b is None:
            continue
        if a is None:
            merged.append(b)
        elif b is None:
            merged.append(a)
        else:
            if claim_name == "scope":
                a = a.to_slice(claim_name)
                b = b.to_slice(claim_name)
            merged.append(a.merge(b.operator_value))

    merged = sort_by_priority(merged)
    _validate_policies_can_combine(merged)
    return merged


def _merge_policy_sets(
    existing: Optional[PolicySet], policy: Optional[PolicySet]
) -> Optional[PolicySet]:
    # Only parameters already named by the accumulated policy are merged.
    if policy is None:
        return existing
    if existing is None:
        return dict(policy)
    return {
        key: PolicyOperators(merge_policy_operators(key, policy.get(key), operators))
        for key, operators in existing.items()
    }


def _copy_policy(policy: MetadataPolicy) -> MetadataPolicy:
    def copied(policy_set: Optional[PolicySet]) -> Optional[PolicySet]:
        return None if policy_set is None else dict(policy_set)

    return MetadataPolicy(
        federation_entity=copied(policy.federation_entity),
        openid_relying_party=copied(policy.openid_relying_party),
        openid_provider=copied(policy.openid_provider),
    )


def process_and_extract_policy(
    trust_chain: Sequence[EntityStatement],
) -> Optional[MetadataPolicy]:
    """Combine the metadata policies of a trust chain into one policy."""
    chain = list(trust_chain)
    if len(chain) == 1:
        return chain[0].metadata_policy
    if len(chain) < 2:
        raise PolicyError("trust chain must have at least 2 statements")

    result = chain[0].metadata_policy
    if result is not None:
        result = _copy_policy(result)

    for statement in chain[1:]:
        policy = statement.metadata_policy
        if policy is None:
            continue
        if result is None:
            result = _copy_policy(policy)
            continue
        result = MetadataPolicy(
            federation_entity=_merge_policy_sets(
                result.federation_entity, policy.federation_entity
            ),
            openid_relying_party=_merge_policy_sets(
                result.openid_relying_party, policy.openid_relying_party
            ),
            openid_provider=_merge_policy_sets(
                result.openid_provider, policy.openid_provider
            ),
        )
    return result


def _apply_in_sequence(values: dict, policy_set: Optional[PolicySet]) -> None:
    for key, operators in (policy_set or {}).items():
        for operator in operators:
            values[key] = operator.resolve(values.get(key))


def _join_scope(resolved: Any) -> str:
    if not isinstance(resolved, (list, tuple)):
        raise PolicyError("scope must be a string or array of strings")
    if not all(isinstance(item, str) for item in resolved):
        raise PolicyError("all scope values must be strings")
    return " ".join(resolved)


def _apply_relying_party(values: dict, policy_set: Optional[PolicySet]) -> None:
    # Each operator resolves against the value the subject started with.
    for key, operators in (policy_set or {}).items():
        is_scope = key == "scope"
        existing = values.get(key)
        if is_scope:
            existing = split_scope(values[key]) if key in values else []
        for operator in operators:
            if is_scope:
                operator = operator.to_slice(key)
            resolved = operator.resolve(existing)
            if is_scope:
                resolved = _join_scope(resolved)
            values[key] = resolved


def apply_policy(subject: EntityStatement, policy: MetadataPolicy) -> EntityStatement:
    """Return a copy of ``subject`` with the policy applied to its metadata."""
    result = copy.deepcopy(subject)
    metadata = result.metadata
    if metadata is None:
        return result

    if metadata.federation_entity is not None:
        _apply_in_sequence(metadata.federation_entity, policy.federation_entity)
    if metadata.openid_relying_party is not None:
        _apply_relying_party(metadata.openid_relying_party, policy.openid_relying_party)
    if metadata.openid_provider is not None:
        _apply_in_sequence(metadata.openid_provider, policy.openid_provider)
    return result


def calculate_chain_expiration(chain: Sequence[EntityStatement]) -> int:
    """Return the earliest expiry time of the statements in a chain."""
    if not chain:
        raise ValueError("trust chain must not be empty")
    return min(statement.exp for statement in chain)