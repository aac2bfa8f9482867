"""Configuration of a federation entity server and its subordinates."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

from oidfed.entity_identifier import EntityIdentifier
from oidfed.model import (
    EntityStatement,
    ExtendedListingResponse,
    MetadataPolicy,
    SubordinateStatusResponse,
    TrustMarkHolder,
)


class SubordinateNotFoundError(LookupError):
    """Raised when a subordinate entity is neither cached nor retrievable."""


class Retriever(ABC):
    """Looks up subordinate entities from an external store."""

    @abstractmethod
    def get_subordinate(self, identifier: str) -> SubordinateConfiguration:
        """Return the configuration of one subordinate."""

    @abstractmethod
    def get_subordinates(self) -> dict[str, SubordinateConfiguration]:
        """Return every subordinate, keyed by entity identifier."""

    @abstractmethod
    def get_subordinate_signers(self) -> list[SignerConfiguration]:
        """Return the signers used for subordinate statements."""


class TrustMarkIssuerRetriever(ABC):
    """Lists the entities allowed to issue each trust mark type."""

    @abstractmethod
    def list_trust_mark_issuers(self) -> dict[str, list[EntityIdentifier]]:
        """Return trust mark type mapped to its issuers."""


class TrustMarkRetriever(ABC):
    """Issues trust marks and reports on them."""

    @abstractmethod
    def get_trust_mark_status(self, trust_mark: str) -> Optional[str]:
        """Return the status of a trust mark."""

    @abstractmethod
    def issue_trust_mark(
        self, trust_mark_identifier: str, entity_identifier: str
    ) -> Optional[str]:
        """Issue a trust mark of the given type to an entity."""

    @abstractmethod
    def list_trust_marks(
        self, trust_mark_identifier: str, identifier: Optional[str]
    ) -> list[EntityIdentifier]:
        """List the entities holding a trust mark of the given type."""


class ExtendedListingRetriever(ABC):
    """Serves pages of the extended subordinate listing."""

    @abstractmethod
    def get_extended_subordinates(
        self, from_entity: Optional[str], size: int, claims: list[str]
    ) -> ExtendedListingResponse:
        """Return one page of subordinates, starting after ``from_entity``."""


class SubordinateStatusRetriever(ABC):
    """Reports the registration history of subordinates."""

    @abstractmethod
    def get_subordinate_status(self, sub: Optional[str]) -> SubordinateStatusResponse:
        """Return the registration events of a subordinate."""


@dataclass
class SignerConfiguration:
    """A signer together with the key id and algorithm it signs with."""

    signer: Any
    key_id: str
    algorithm: str


@dataclass
class SubordinateConfiguration:
    """What a superior knows about one of its subordinates."""

    cached_at: int = 0
    policies: MetadataPolicy = field(default_factory=MetadataPolicy)
    jwks: dict[str, Any] = field(default_factory=dict)
    enforce_unique_kids: bool = False
    # Overrides the key material used to sign statements about this subordinate.
    signer_configuration: Optional[SignerConfiguration] = None


@dataclass
class IntermediateConfiguration:
    """Settings of an entity that issues statements about subordinates."""

    subordinate_statement_lifetime: timedelta = timedelta(0)
    subordinate_cache_time: timedelta = timedelta(0)
    _subordinates: dict[str, SubordinateConfiguration] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def subordinates(self) -> dict[str, SubordinateConfiguration]:
        return self._subordinates

    def add_subordinate(
        self, identifier: str, subordinate_configuration: SubordinateConfiguration
    ) -> None:
        """Register a subordinate and stamp it as freshly cached."""
        subordinate_configuration.enforce_unique_kids = True
        subordinate_configuration.cached_at = int(time.time())
        self._subordinates[identifier] = subordinate_configuration


@dataclass
class ExtendedListingConfiguration:
    """Settings of the extended listing extension."""

    enabled: bool = False
    size_limit: int = 0
    metadata_retriever: Optional[ExtendedListingRetriever] = None


@dataclass
class SubordinateStatusConfiguration:
    """Settings of the subordinate status extension."""

    enabled: bool = False
    response_lifetime: Optional[timedelta] = None
    metadata_retriever: Optional[SubordinateStatusRetriever] = None


@dataclass
class Extensions:
    """Optional protocol extensions the server offers."""

    extended_listing: ExtendedListingConfiguration = field(
        default_factory=ExtendedListingConfiguration
    )
    subordinate_status: SubordinateStatusConfiguration = field(
        default_factory=SubordinateStatusConfiguration
    )


@dataclass
class ServerConfiguration:
    """Everything a federation entity server needs to run."""

    signer_configuration: Optional[SignerConfiguration] = None
    entity_identifier: str = ""
    authority_hints: list[EntityIdentifier] = field(default_factory=list)
    trust_marks: list[TrustMarkHolder] = field(default_factory=list)
    entity_configuration: EntityStatement = field(default_factory=EntityStatement)
    entity_configuration_lifetime: timedelta = timedelta(0)
    intermediate_configuration: Optional[IntermediateConfiguration] = None
    http_client: Any = None
    extensions: Extensions = field(default_factory=Extensions)
    metadata_retriever: Optional[Retriever] = None
    trust_mark_issuer_retriever: Optional[TrustMarkIssuerRetriever] = None
    trust_mark_retriever: Optional[TrustMarkRetriever] = None

    def get_subordinates(self) -> dict[str, SubordinateConfiguration]:
        """Return every known subordinate, from the retriever if there is one."""
        if self.metadata_retriever is not None:
            return self.metadata_retriever.get_subordinates()
        if self.intermediate_configuration is None:
            return {}
        return dict(self.intermediate_configuration.subordinates)

    def get_subordinate_jwks(self) -> list[SignerConfiguration]:
        """Return the signers configured for subordinate statements."""
        if self.metadata_retriever is not None:
            return self.metadata_retriever.get_subordinate_signers()
        return [
            subordinate.signer_configuration
            for subordinate in self.get_subordinates().values()
            if subordinate.signer_configuration is not None
        ]

    def get_subordinate(self, identifier: str) -> SubordinateConfiguration:
        """Return one subordinate, from the cache while it is fresh.

        Raises SubordinateNotFoundError when it is not cached and there is no
        retriever to ask.
        """
        if self.intermediate_configuration is None:
            self.intermediate_configuration = IntermediateConfiguration()
        intermediate = self.intermediate_configuration
        cached = intermediate.subordinates.get(identifier)

        if cached is not None:
            expires = cached.cached_at + intermediate.subordinate_cache_time.total_seconds()
            if time.time() < expires:
                return cached

        if self.metadata_retriever is None:
            raise SubordinateNotFoundError(f"subordinate entity {identifier} not found")

        entity = self.metadata_retriever.get_subordinate(identifier)
        entity.cached_at = int(time.time())
        intermediate.subordinates[identifier] = entity
        return entity