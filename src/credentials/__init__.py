"""Credential resolution - tokens and tenant domains for the Management API."""

from credentials.cache import CachedToken, TokenCache
from credentials.resolver import (
    CredentialError,
    CredentialResolver,
    TokenRetrievalError,
    format_domain,
    redact_token,
)

__all__ = [
    "CachedToken",
    "TokenCache",
    "CredentialError",
    "CredentialResolver",
    "TokenRetrievalError",
    "format_domain",
    "redact_token",
]
