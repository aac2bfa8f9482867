"""Entity identifiers and federation endpoint URL validation."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit


class EntityIdentifier(str):
    """A validated federation entity identifier (an https URL)."""


def _parse_url(value: str) -> SplitResult:
    """Split a URL, rejecting control characters and malformed input."""
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in value):
        raise ValueError(f"parse {value!r}: invalid control character in URL")
    try:
        return urlsplit(value)
    except ValueError as exc:
        raise ValueError(f"parse {value!r}: {exc}") from exc


def _host(parsed: SplitResult) -> str:
    return parsed.netloc.rpartition("@")[2]


def validate_entity_identifier(value: str) -> EntityIdentifier:
    """Check that ``value`` is a usable entity identifier and return it."""
    try:
        parsed = _parse_url(value)
    except ValueError as exc:
        raise ValueError(f"entity identifiers must be a valid url: {exc}") from exc

    if parsed.scheme != "https":
        raise ValueError("entity identifiers must use the https scheme")
    if not _host(parsed):
        raise ValueError("entity identifiers must have a host component")
    if parsed.fragment:
        raise ValueError("entity identifiers must not contain Fragment components")
    if parsed.query:
        raise ValueError("entity identifiers must not contain Query components")
    return EntityIdentifier(value)


def verify_federation_endpoint(endpoint: object) -> str | None:
    """Check an optional federation endpoint URL; return it unchanged."""
    if endpoint is None:
        return None
    if not isinstance(endpoint, str):
        raise ValueError("endpoint must be a string")
    try:
        parsed = _parse_url(endpoint)
    except ValueError as exc:
        raise ValueError(f"invalid url: {exc}") from exc

    if parsed.scheme != "https":
        raise ValueError(
            f"url does not use the required scheme 'https': {parsed.scheme}"
        )
    if parsed.fragment:
        raise ValueError("url must not contain Fragment components")
    return endpoint