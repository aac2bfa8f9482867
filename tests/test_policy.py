import time

import pytest

from oidfed.add import Add
from oidfed.default import Default
from oidfed.entity_metadata import OpenIDRelyingPartyMetadata
from oidfed.essential import Essential
from oidfed.model import EntityStatement, Metadata, MetadataPolicy
from oidfed.one_of import OneOf
from oidfed.policy import (
    apply_policy,
    calculate_chain_expiration,
    merge_policy_operators,
    process_and_extract_policy,
    sort_by_priority,
)
from oidfed.policy_operator import PolicyError
from oidfed.policy_operators import PolicyOperators
from oidfed.subset_of import SubsetOf
from oidfed.superset_of import SupersetOf
from oidfed.value import Value


def _normalise(value):
    if isinstance(value, dict):
        return {key: _normalise(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return sorted((_normalise(item) for item in value), key=str)
    return value


def _ops():
    return {
        "value": Value(None),
        "add": Add([]),
        "default": Default("x"),
        "one_of": OneOf([]),
        "subset_of": SubsetOf([]),
        "superset_of": SupersetOf([]),
        "essential": Essential(False),
    }


@pytest.mark.parametrize(
    "order, expected",
    [
        (
            ["value", "add", "default", "one_of", "subset_of", "superset_of", "essential"],
            ["value", "add", "default", "one_of", "subset_of", "superset_of", "essential"],
        ),
        (
            ["essential", "default", "value", "one_of", "subset_of", "add", "superset_of"],
            ["value", "add", "default", "one_of", "subset_of", "superset_of", "essential"],
        ),
        (
            ["one_of", "subset_of", "add", "superset_of"],
            ["add", "one_of", "subset_of", "superset_of"],
        ),
    ],
)
def test_sort_by_priority(order, expected):
    ops = _ops()
    result = sort_by_priority([ops[name] for name in order])
    assert [str(op) for op in result] == expected


def _op_subject():
    return EntityStatement.from_json(
        {
            "authority_hints": ["https://ta.example.com"],
            "exp": int(time.time()) + 3600,
            "iat": 1568310847,
            "iss": "https://op.example.com",
            "sub": "https://op.example.com",
            "jwks": {"keys": [{"e": "AQAB", "kid": "key-1", "kty": "RSA", "n": "placeholder"}]},
            "metadata": {
                "openid_provider": {
                    "issuer": "https://op.example.com/openid",
                    "signed_jwks_uri": "https://op.example.com/openid/jwks.jose",
                    "authorization_endpoint": "https://op.example.com/openid/authorization",
                    "client_registration_types_supported": ["automatic", "explicit"],
                    "request_parameter_supported": True,
                    "grant_types_supported": [
                        "authorization_code",
                        "implicit",
                        "urn:ietf:params:oauth:grant-type:jwt-bearer",
                    ],
                    "id_token_signing_alg_values_supported": ["ES256", "RS256"],
                    "logo_uri": "https://www.example.com/img/logo.svg",
                    "op_policy_uri": "https://www.example.com/en/legal/",
                    "response_types_supported": ["code", "code id_token", "token"],
                    "subject_types_supported": ["pairwise", "public"],
                    "token_endpoint": "https://op.example.com/openid/token",
                    "federation_registration_endpoint": "https://op.example.com/openid/fedreg",
                    "token_endpoint_auth_methods_supported": [
                        "client_secret_post",
                        "client_secret_basic",
                        "client_secret_jwt",
                        "private_key_jwt",
                    ],
                }
            },
        }
    )


POLICY_A = (
    '{"openid_provider": {"contacts": {"add": ["admin@example.com"]}},'
    '"openid_relying_party": {"contacts": {"add": ["admin@example.com"]}}}'
)
POLICY_B = (
    '{"openid_provider": {"id_token_signing_alg_values_supported": '
    '{"subset_of": ["RS256","ES256","ES384","ES512"]},'
    '"token_endpoint_auth_methods_supported": {"subset_of": ["client_secret_jwt","private_key_jwt"]},'
    '"userinfo_signing_alg_values_supported": {"subset_of": ["ES256","ES384","ES512"]}}}'
)
POLICY_C = (
    '{"openid_provider": {"contacts": {"add": ["ops@example.com"]},'
    '"organization_name": {"value": "Example University"},'
    '"subject_types_supported": {"value": ["pairwise"]},'
    '"token_endpoint_auth_methods_supported": {"default": ["private_key_jwt"],'
    '"subset_of": ["private_key_jwt","client_secret_jwt"],"superset_of": ["private_key_jwt"]}}}'
)

EXPECTED_OP = {
    "authorization_endpoint": "https://op.example.com/openid/authorization",
    "contacts": ["ops@example.com", "admin@example.com"],
    "federation_registration_endpoint": "https://op.example.com/openid/fedreg",
    "client_registration_types_supported": ["automatic", "explicit"],
    "grant_types_supported": [
        "authorization_code",
        "implicit",
        "urn:ietf:params:oauth:grant-type:jwt-bearer",
    ],
    "id_token_signing_alg_values_supported": ["RS256", "ES256"],
    "issuer": "https://op.example.com/openid",
    "signed_jwks_uri": "https://op.example.com/openid/jwks.jose",
    "logo_uri": "https://www.example.com/img/logo.svg",
    "organization_name": "Example University",
    "op_policy_uri": "https://www.example.com/en/legal/",
    "request_parameter_supported": True,
    "response_types_supported": ["code", "code id_token", "token"],
    "subject_types_supported": ["pairwise"],
    "token_endpoint": "https://op.example.com/openid/token",
    "token_endpoint_auth_methods_supported": ["private_key_jwt", "client_secret_jwt"],
}


@pytest.mark.parametrize("trailing_anchor", [True, False])
def test_apply_policy_for_chain(trailing_anchor):
    chain = [
        EntityStatement(),
        EntityStatement(metadata_policy=MetadataPolicy.from_json(POLICY_C)),
        EntityStatement(metadata_policy=MetadataPolicy.from_json(POLICY_B)),
        EntityStatement(metadata_policy=MetadataPolicy.from_json(POLICY_A)),
    ]
    if trailing_anchor:
        chain.append(EntityStatement())
    policy = process_and_extract_policy(chain)

    result = apply_policy(_op_subject(), policy)
    assert result.metadata.openid_provider is not None
    got = result.metadata.to_json()["openid_provider"]
    assert _normalise(got) == _normalise(EXPECTED_OP)


def _rp_subject(**extra):
    return EntityStatement(
        metadata=Metadata(
            openid_relying_party=OpenIDRelyingPartyMetadata(
                {"client_id": "https://op.example.com/openid", **extra}
            )
        )
    )


def _scope_policy(*operators):
    return MetadataPolicy(openid_relying_party={"scope": PolicyOperators(list(operators))})


def test_scope_add_to_existing_values():
    policy = process_and_extract_policy(
        [EntityStatement(), EntityStatement(metadata_policy=_scope_policy(Add(["foo", "bar", "baz"])))]
    )
    result = apply_policy(_rp_subject(scope="openid"), policy)
    assert dict(result.metadata.openid_relying_party) == {
        "client_id": "https://op.example.com/openid",
        "scope": "openid foo bar baz",
    }


def test_scope_add_to_no_existing_values():
    policy = process_and_extract_policy(
        [EntityStatement(), EntityStatement(metadata_policy=_scope_policy(Add(["foo", "bar", "baz"])))]
    )
    result = apply_policy(_rp_subject(), policy)
    assert dict(result.metadata.openid_relying_party) == {
        "client_id": "https://op.example.com/openid",
        "scope": "foo bar baz",
    }


def test_scope_with_mix_of_policies():
    chain = [
        EntityStatement(),
        EntityStatement(metadata_policy=_scope_policy(Add(["foo", "bar", "baz"]))),
        EntityStatement(metadata_policy=_scope_policy(Value(["foo", "bar", "baz", "bong"]))),
        EntityStatement(metadata_policy=_scope_policy(Value("foo bar baz bong"))),
    ]
    policy = process_and_extract_policy(chain)
    result = apply_policy(_rp_subject(), policy)
    assert dict(result.metadata.openid_relying_party) == {
        "client_id": "https://op.example.com/openid",
        "scope": "foo bar baz",
    }


def test_apply_policy_leaves_subject_unchanged():
    subject = _rp_subject(scope="openid")
    apply_policy(subject, _scope_policy(Add(["foo"])))
    assert dict(subject.metadata.openid_relying_party) == {
        "client_id": "https://op.example.com/openid",
        "scope": "openid",
    }


def test_apply_policy_without_metadata_returns_subject():
    subject = EntityStatement(iss="https://op.example.com", exp=5)
    result = apply_policy(subject, _scope_policy(Add(["foo"])))
    assert result == subject


def test_scope_values_must_be_strings():
    with pytest.raises(PolicyError, match="all scope values must be strings"):
        apply_policy(_rp_subject(), _scope_policy(Value([1])))


def test_merge_both_empty():
    assert merge_policy_operators("x", PolicyOperators(), PolicyOperators()) == []


def test_merge_one_side_empty_returns_other():
    ops = [Add(["a"])]
    assert merge_policy_operators("x", PolicyOperators(), PolicyOperators(ops)) == ops


def test_merge_conflicting_operators_raises():
    with pytest.raises(PolicyError) as excinfo:
        merge_policy_operators(
            "x", PolicyOperators([Add(["a"])]), PolicyOperators([OneOf(["a"])])
        )
    assert str(excinfo.value) == (
        "cannot merge policy of type 'add' with policy of type 'one_of'"
    )


def test_merge_scope_value_string_with_list():
    result = merge_policy_operators(
        "scope", PolicyOperators([Value("a b")]), PolicyOperators([Value(["a", "b"])])
    )
    assert [op.operator_value for op in result] == [["a", "b"]]


def test_merge_differing_values_raises():
    with pytest.raises(PolicyError, match="merging a b and \\[a b\\] not possible"):
        merge_policy_operators(
            "other", PolicyOperators([Value("a b")]), PolicyOperators([Value(["a", "b"])])
        )


def test_merge_sorts_by_priority():
    result = merge_policy_operators(
        "x",
        PolicyOperators([SubsetOf(["a", "b"]), Default(["a"])]),
        PolicyOperators([SubsetOf(["b", "a"])]),
    )
    assert [str(op) for op in result] == ["default", "subset_of"]
    assert result[1].operator_value == ["a", "b"]


def test_process_empty_chain_raises():
    with pytest.raises(PolicyError, match="trust chain must have at least 2 statements"):
        process_and_extract_policy([])


def test_process_single_statement_returns_its_policy():
    policy = _scope_policy(Add(["foo"]))
    assert process_and_extract_policy([EntityStatement(metadata_policy=policy)]) is policy


def test_calculate_chain_expiration_takes_earliest():
    chain = [EntityStatement(exp=300), EntityStatement(exp=100), EntityStatement(exp=200)]
    assert calculate_chain_expiration(chain) == 100


def test_calculate_chain_expiration_empty_raises():
    with pytest.raises(ValueError):
        calculate_chain_expiration([])