"""Entity statements, entity metadata and metadata policies."""

from __future__ import annotations

import copy
import json
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from oidfed.entity_identifier import EntityIdentifier, validate_entity_identifier
from oidfed.entity_metadata import (
    FederationMetadata,
    MetadataError,
    OpenIDProviderMetadata,
    OpenIDRelyingPartyMetadata,
)
from oidfed.policy_operator import PolicyError
from oidfed.policy_operators import PolicyOperators

PolicySet = dict[str, PolicyOperators]


def _decode(data: Any) -> Any:
    """Turn JSON text or bytes into Python values; pass decoded values through."""
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    if isinstance(data, str):
        return json.loads(data)
    return data


def _parse_entity_metadata(
    value: Any, cls: type, malformed_label: str, invalid_label: str
) -> Any:
    if value is None:
        return cls()
    if not isinstance(value, dict):
        raise MetadataError(
            f"malformed {malformed_label} metadata: expected a JSON object"
        )
    metadata = cls(copy.deepcopy(value))
    try:
        metadata.verify_metadata()
    except MetadataError as exc:
        raise MetadataError(f"invalid {invalid_label} metadata: {exc}") from exc
    return metadata


def _metadata_to_map(values: dict) -> dict[str, Any]:
    """Copy metadata for output, leaving out parameters whose value is None."""
    result: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, dict):
            result[key] = _metadata_to_map(value)
        elif isinstance(value, (list, tuple)):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def _parse_policy_set(value: Any, label: str) -> Optional[PolicySet]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise PolicyError(f"malformed {label} metadata policy: expected a JSON object")
    try:
        return {
            key: PolicyOperators.from_json(
                operators if operators is None or isinstance(operators, dict)
                else json.dumps(operators)
            )
            for key, operators in value.items()
        }
    except PolicyError as exc:
        raise PolicyError(f"malformed {label} metadata policy: {exc}") from exc


def _policy_set_to_map(policy_set: PolicySet) -> dict[str, Any]:
    return {key: operators.to_json() for key, operators in policy_set.items()}


@dataclass
class TrustMarkHolder:
    """A trust mark carried by an entity, with its type."""

    trust_mark_type: str
    trust_mark: str


@dataclass
class Metadata:
    """Entity metadata, one document per entity type."""

    federation_entity: Optional[FederationMetadata] = None
    openid_relying_party: Optional[OpenIDRelyingPartyMetadata] = None
    openid_provider: Optional[OpenIDProviderMetadata] = None

    @classmethod
    def from_json(cls, data: Any) -> Metadata:
        """Parse and verify metadata from JSON text, bytes or a decoded dict."""
        document = _decode(data)
        if document is None:
            return cls()
        if not isinstance(document, dict):
            raise MetadataError("metadata must be a JSON object")

        metadata = cls()
        if "federation_entity" in document:
            metadata.federation_entity = _parse_entity_metadata(
                document["federation_entity"],
                FederationMetadata,
                "federation entity",
                "federation entity",
            )
        if "openid_relying_party" in document:
            metadata.openid_relying_party = _parse_entity_metadata(
                document["openid_relying_party"],
                OpenIDRelyingPartyMetadata,
                "openid relying party",
                "openid relying party",
            )
        if "openid_provider" in document:
            metadata.openid_provider = _parse_entity_metadata(
                document["openid_provider"],
                OpenIDProviderMetadata,
                "openid provider",
                "openid connect openid provider",
            )
        return metadata

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-ready mapping; parameters set to None are left out."""
        result: dict[str, Any] = {}
        if self.federation_entity is not None:
            result["federation_entity"] = _metadata_to_map(self.federation_entity)
        if self.openid_relying_party is not None:
            result["openid_relying_party"] = _metadata_to_map(self.openid_relying_party)
        if self.openid_provider is not None:
            result["openid_provider"] = _metadata_to_map(self.openid_provider)
        return result


@dataclass
class MetadataPolicy:
    """Metadata policy operators, per entity type and parameter."""

    federation_entity: Optional[PolicySet] = None
    openid_relying_party: Optional[PolicySet] = None
    openid_provider: Optional[PolicySet] = None

    @classmethod
    def from_json(cls, data: Any) -> MetadataPolicy:
        """Parse a metadata policy from JSON text, bytes or a decoded dict."""
        document = _decode(data)
        if document is None:
            return cls()
        if not isinstance(document, dict):
            raise PolicyError("metadata policy must be a JSON object")

        policy = cls()
        if "federation_entity" in document:
            policy.federation_entity = _parse_policy_set(
                document["federation_entity"], "federation entity"
            )
        if "openid_relying_party" in document:
            policy.openid_relying_party = _parse_policy_set(
                document["openid_relying_party"], "openid relying party"
            )
        if "openid_provider" in document:
            policy.openid_provider = _parse_policy_set(
                document["openid_provider"], "openid provider"
            )
        return policy

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of entity type to parameter operators."""
        result: dict[str, Any] = {}
        if self.federation_entity is not None:
            result["federation_entity"] = _policy_set_to_map(self.federation_entity)
        if self.openid_relying_party is not None:
            result["openid_relying_party"] = _policy_set_to_map(
                self.openid_relying_party
            )
        if self.openid_provider is not None:
            result["openid_provider"] = _policy_set_to_map(self.openid_provider)
        return result


def _required_string(claims: dict, name: str) -> str:
    if name not in claims:
        raise ValueError(f"missing required body claim '{name}'")
    value = claims[name]
    if not isinstance(value, str):
        raise ValueError(f"'{name}' claim is malformed")
    return value


def _required_number(claims: dict, name: str) -> int:
    if name not in claims:
        raise ValueError(f"missing required body claim '{name}'")
    value = claims[name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{name}' claim is malformed")
    return int(value)


def _parse_authority_hints(value: Any) -> list[EntityIdentifier]:
    if not isinstance(value, list):
        raise ValueError("'authority_hints' claim is malformed")
    hints = []
    for hint in value:
        if not isinstance(hint, str):
            raise ValueError(
                "'authority_hints' claim contains malformed entity identifier"
            )
        try:
            hints.append(validate_entity_identifier(hint))
        except ValueError as exc:
            raise ValueError(
                f"'authority_hints' claim contains invalid entity identifier: {exc}"
            ) from exc
    return hints


@dataclass
class EntityStatement:
    """A signed statement one entity makes about itself or a subordinate."""

    iss: str = ""
    sub: str = ""
    iat: int = 0
    exp: int = 0
    jwks: dict[str, Any] = field(default_factory=dict)
    authority_hints: list[EntityIdentifier] = field(default_factory=list)
    metadata: Optional[Metadata] = None
    metadata_policy: Optional[MetadataPolicy] = None
    constraints: Any = None
    crit: Any = None
    metadata_policy_crit: Any = None
    trust_marks: list[TrustMarkHolder] = field(default_factory=list)
    trust_mark_issuers: dict[str, list[EntityIdentifier]] = field(default_factory=dict)
    trust_mark_owners: Any = None
    source_endpoint: Any = None

    @classmethod
    def from_json(cls, data: Any) -> EntityStatement:
        """Parse and check the claims of a statement body.

        Raises ValueError when a required claim is missing or malformed, or
        when the statement has expired.
        """
        claims = _decode(data)
        if not isinstance(claims, dict):
            raise ValueError("entity statement must be a JSON object")

        statement = cls(
            iss=EntityIdentifier(_required_string(claims, "iss")),
            sub=EntityIdentifier(_required_string(claims, "sub")),
            iat=_required_number(claims, "iat"),
        )
        statement.exp = _required_number(claims, "exp")
        if int(time.time()) > statement.exp:
            raise ValueError("entity statement has expired")

        if "authority_hints" in claims:
            statement.authority_hints = _parse_authority_hints(
                claims["authority_hints"]
            )

        if "jwks" not in claims:
            raise ValueError("missing required body claim 'jwks'")
        jwks = claims["jwks"]
        if not isinstance(jwks, dict):
            raise ValueError("invalid 'jwks' claim: expected a JSON object")
        statement.jwks = copy.deepcopy(jwks)

        if "metadata" in claims:
            value = claims["metadata"]
            if value is not None and not isinstance(value, dict):
                raise ValueError("invalid 'metadata' claim: expected a JSON object")
            try:
                statement.metadata = Metadata.from_json(value)
            except ValueError as exc:
                raise ValueError(f"invalid 'metadata' claim: {exc}") from exc

        if "metadata_policy" in claims:
            value = claims["metadata_policy"]
            if value is not None and not isinstance(value, dict):
                raise ValueError(
                    "invalid 'metadata_policy' claim: expected a JSON object"
                )
            try:
                statement.metadata_policy = MetadataPolicy.from_json(value)
            except ValueError as exc:
                raise ValueError(f"invalid 'metadata_policy' claim: {exc}") from exc
        return statement

    def to_json(self) -> dict[str, Any]:
        """Return the statement body as a JSON-ready mapping."""
        result: dict[str, Any] = {
            "iss": self.iss,
            "sub": self.sub,
            "iat": self.iat,
            "exp": self.exp,
            "jwks": self.jwks,
        }
        if self.authority_hints:
            result["authority_hints"] = list(self.authority_hints)
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_json()
        if self.metadata_policy is not None:
            result["metadata_policy"] = self.metadata_policy.to_json()
        for name in ("constraints", "crit", "metadata_policy_crit"):
            if getattr(self, name) is not None:
                result[name] = getattr(self, name)
        if self.trust_marks:
            result["trust_marks"] = [asdict(mark) for mark in self.trust_marks]
        if self.trust_mark_issuers:
            result["trust_mark_issuers"] = {
                key: list(issuers) for key, issuers in self.trust_mark_issuers.items()
            }
        for name in ("trust_mark_owners", "source_endpoint"):
            if getattr(self, name) is not None:
                result[name] = getattr(self, name)
        return result


@dataclass
class ResolveResponse:
    """The body of a resolve endpoint response."""

    iss: str
    sub: str
    iat: int
    exp: int
    metadata: Optional[Metadata] = None
    trust_marks: Any = None
    trust_chain: list[str] = field(default_factory=list)


@dataclass
class TrustMarkStatusResponse:
    """The body of a trust mark status endpoint response."""

    status: str


@dataclass
class ExtendedListingResponse:
    """One page of an extended subordinate listing."""

    immediate_subordinate_entities: list[dict[str, Any]] = field(default_factory=list)
    next_entity_id: Optional[EntityIdentifier] = None


@dataclass
class SubordinateStatusEvent:
    """One registration event in a subordinate's history."""

    iat: int
    event: str
    event_description: Optional[str] = None


@dataclass
class SubordinateStatusResponse:
    """The registration events recorded for a subordinate."""

    events: list[SubordinateStatusEvent] = field(default_factory=list)