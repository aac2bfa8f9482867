"""OpenID Federation data model, metadata validation and metadata policy engine."""

__version__ = "0.1.0"