"""Metadata documents for the supported entity types."""

from __future__ import annotations

from oidfed.entity_identifier import verify_federation_endpoint


class MetadataError(ValueError):
    """Raised when entity metadata breaks the rules of its entity type."""


_FEDERATION_ENDPOINTS = (
    "federation_fetch_endpoint",
    "federation_list_endpoint",
    "federation_resolve_endpoint",
    "federation_trust_mark_status_endpoint",
    "federation_trust_mark_list_endpoint",
    "federation_trust_mark_endpoint",
    "federation_historical_keys_endpoint",
)

_SIGNING_ALGS = "endpoint_auth_signing_alg_values_supported"


def _require_claims(metadata: dict, claims: tuple[str, ...]) -> None:
    for claim in claims:
        if claim not in metadata:
            raise MetadataError(f"missing required '{claim}' claim")


class FederationMetadata(dict):
    """Metadata of the ``federation_entity`` entity type."""

    def verify_metadata(self) -> FederationMetadata:
        """Check endpoint URLs and algorithm lists; return self."""
        if not self:
            return self
        for key in _FEDERATION_ENDPOINTS:
            try:
                verify_federation_endpoint(self.get(key))
            except ValueError as exc:
                raise MetadataError(f"invalid {key} endpoint: {exc}") from exc

        if _SIGNING_ALGS in self:
            algs = self[_SIGNING_ALGS]
            if not isinstance(algs, list) or not all(isinstance(a, str) for a in algs):
                raise MetadataError(f"invalid {_SIGNING_ALGS} metadata value")
        return self


class OpenIDRelyingPartyMetadata(dict):
    """Metadata of the ``openid_relying_party`` entity type."""

    _REQUIRED = ("redirect_uris", "client_registration_types")

    def verify_metadata(self) -> OpenIDRelyingPartyMetadata:
        """Check that the required claims are present; return self."""
        if self:
            _require_claims(self, self._REQUIRED)
        return self


class OpenIDProviderMetadata(dict):
    """Metadata of the ``openid_provider`` entity type."""

    _REQUIRED = (
        "response_types_supported",
        "subject_types_supported",
        "id_token_signing_alg_values_supported",
        "client_registration_types_supported",
        "issuer",
        "authorization_endpoint",
        "token_endpoint",
    )

    def verify_metadata(self) -> OpenIDProviderMetadata:
        """Check that the required claims are present; return self."""
        if self:
            _require_claims(self, self._REQUIRED)
        return self