"""Failure classification for Management API calls.

HTTP status codes and transport exceptions are each mapped onto a closed
set of kinds, then rendered into a user-facing explanation with a
suggested remedy.
"""

import asyncio
import socket
import ssl
from enum import Enum
from typing import Any, Iterator, Optional

import httpx


class NetworkErrorKind(str, Enum):
    """Transport-level failure kinds."""
    TIMEOUT = "timeout"
    DNS_FAILURE = "dns_failure"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_RESET = "connection_reset"
    TLS_ERROR = "tls_error"
    OTHER = "other"


class HttpErrorCategory(str, Enum):
    """Categories of non-success HTTP responses."""
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    OTHER = "other"


_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated",
)


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_network_error(exc: BaseException) -> NetworkErrorKind:
    """
    Map a transport exception onto a ``NetworkErrorKind``.

    The exception and its causes are inspected by type first; the text of
    connection errors is used as a last resort since httpx wraps the
    underlying socket errors.
    """
    chain = list(_exception_chain(exc))

    for error in chain:
        if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
            return NetworkErrorKind.TIMEOUT
        if isinstance(error, ssl.SSLError):
            return NetworkErrorKind.TLS_ERROR
        if isinstance(error, socket.gaierror):
            return NetworkErrorKind.DNS_FAILURE
        if isinstance(error, ConnectionRefusedError):
            return NetworkErrorKind.CONNECTION_REFUSED
        if isinstance(error, ConnectionResetError):
            return NetworkErrorKind.CONNECTION_RESET

    for error in chain:
        message = str(error).lower()
        if any(marker in message for marker in _DNS_MARKERS):
            return NetworkErrorKind.DNS_FAILURE
        if "connection refused" in message:
            return NetworkErrorKind.CONNECTION_REFUSED
        if "connection reset" in message or "server disconnected" in message:
            return NetworkErrorKind.CONNECTION_RESET
        if "ssl" in message or "certificate" in message:
            return NetworkErrorKind.TLS_ERROR

    return NetworkErrorKind.OTHER


def describe_network_failure(exc: BaseException, domain: Optional[str] = None) -> str:
    """Render a transport failure as a user-facing message."""
    kind = classify_network_error(exc)
    if kind == NetworkErrorKind.TIMEOUT:
        return "Request timed out. The Auth0 API did not respond in time."
    if kind == NetworkErrorKind.DNS_FAILURE:
        target = f" at {domain}" if domain else ""
        return (
            f"Connection failed: Unable to reach the Auth0 API{target} (DNS lookup failed). "
            "Check your network connection and AUTH0_DOMAIN."
        )
    if kind == NetworkErrorKind.CONNECTION_REFUSED:
        return (
            "Connection failed: Unable to reach the Auth0 API (connection refused). "
            "Check your network connection."
        )
    if kind == NetworkErrorKind.CONNECTION_RESET:
        return "Connection was reset by the server. Try again later."
    if kind == NetworkErrorKind.TLS_ERROR:
        return f"Secure connection to the Auth0 API failed (TLS error: {exc}). Check proxy and certificate settings."
    return f"Network error: {exc or type(exc).__name__}"


def classify_status(status_code: int) -> HttpErrorCategory:
    """Map an HTTP status code onto an ``HttpErrorCategory``."""
    if status_code == 401:
        return HttpErrorCategory.UNAUTHORIZED
    if status_code == 403:
        return HttpErrorCategory.FORBIDDEN
    if status_code == 404:
        return HttpErrorCategory.NOT_FOUND
    if status_code == 409:
        return HttpErrorCategory.CONFLICT
    if status_code in (400, 422):
        return HttpErrorCategory.VALIDATION
    if status_code == 429:
        return HttpErrorCategory.RATE_LIMITED
    if status_code >= 500:
        return HttpErrorCategory.SERVER_ERROR
    return HttpErrorCategory.OTHER


def upstream_message(body: Any) -> Optional[str]:
    """Pull the human readable message out of an Auth0 error body."""
    if isinstance(body, dict):
        message = body.get("message") or body.get("error_description")
        if isinstance(message, str) and message:
            return message
    return None


def describe_http_failure(
    status_code: int,
    reason: str,
    *,
    action: str,
    scope: str,
    not_found: Optional[str] = None,
    hints: Optional[dict[int, str]] = None,
    body: Any = None
) -> str:
    """
    Render a non-success HTTP response as a user-facing message.

    Args:
        status_code: HTTP status code
        reason: HTTP reason phrase
        action: Verb phrase for the failed operation ("list applications")
        scope: Management API scope the operation needs
        not_found: Message replacing the generic text on a 404
        hints: Per-status explanations overriding the generic ones
        body: Parsed upstream error body, if any

    Returns:
        Message text
    """
    category = classify_status(status_code)
    hints = hints or {}

    if category == HttpErrorCategory.NOT_FOUND and not_found:
        message = not_found
    else:
        message = f"Failed to {action}: {status_code} {reason}".rstrip()
        hint = hints.get(status_code) or _generic_hint(category, scope)
        if hint:
            message += f"\nError: {hint}"

    if category == HttpErrorCategory.UNAUTHORIZED and "auth0 login" not in message:
        message += '\nTry running "auth0 login" to refresh your token.'

    details = upstream_message(body)
    if details:
        message += f"\nDetails: {details}"
    return message


def _generic_hint(category: HttpErrorCategory, scope: str) -> Optional[str]:
    if category == HttpErrorCategory.UNAUTHORIZED:
        return (
            f"Unauthorized. Your token might be expired or invalid or missing the {scope} scope. "
            'Try running "auth0 login" to refresh your token.'
        )
    if category == HttpErrorCategory.FORBIDDEN:
        return (
            f"Forbidden. Your token might not have the required scopes ({scope}). "
            f'Try running "auth0 login --scopes {scope}" to get the proper permissions.'
        )
    if category == HttpErrorCategory.NOT_FOUND:
        return "The requested resource was not found. Check the identifier and try again."
    if category == HttpErrorCategory.CONFLICT:
        return "Conflict. The resource is in use or already exists."
    if category == HttpErrorCategory.VALIDATION:
        return "Validation error. Check the parameters you provided."
    if category == HttpErrorCategory.RATE_LIMITED:
        return "Rate limited. You have made too many requests to the Auth0 API. Please try again later."
    if category == HttpErrorCategory.SERVER_ERROR:
        return "Auth0 server error. The Auth0 API might be experiencing issues. Please try again later."
    return None
