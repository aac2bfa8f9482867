from types import SimpleNamespace

import pytest

from oidfed.essential import Essential
from oidfed.policy_operator import PolicyError


@pytest.mark.parametrize(
    ("metadata", "operator", "expected"),
    [
        ("foo", True, "foo"),
        (None, False, None),
        ("foo", False, "foo"),
        ([], True, []),
    ],
)
def test_resolve(metadata, operator, expected):
    assert Essential(operator).resolve(metadata) == expected


def test_resolve_missing_essential_value():
    with pytest.raises(PolicyError) as exc:
        Essential(True).resolve(None)
    assert str(exc.value) == "property marked as essential and not provided"


@pytest.mark.parametrize(
    ("operator", "to_merge", "expected"),
    [(True, True, True), (True, False, True), (False, False, False)],
)
def test_merge(operator, to_merge, expected):
    assert Essential(operator).merge(to_merge).operator_value is expected


def test_merge_non_boolean():
    with pytest.raises(PolicyError) as exc:
        Essential(True).merge("invalid")
    assert str(exc.value) == "MergePolicyOperators value must be a boolean"


def test_construction():
    assert Essential(None).operator_value is False
    with pytest.raises(PolicyError) as exc:
        Essential([])
    assert str(exc.value) == "operator value must be a boolean"
    with pytest.raises(PolicyError):
        Essential("true")


def test_to_slice_returns_self():
    op = Essential(True)
    assert op.to_slice("scope") is op


def test_conflict_with_null_value():
    def found(name):
        return SimpleNamespace(operator_value=None) if name == "value" else None

    with pytest.raises(PolicyError) as exc:
        Essential(True).check_for_conflict(found)
    assert "'essential' is true" in str(exc.value)
    assert Essential(False).check_for_conflict(found) is None