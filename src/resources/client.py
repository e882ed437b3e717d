"""Thin async client for the Auth0 Management API."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from shared.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "auth0-mcp-server"


@dataclass
class APIRequest:
    """A single Management API call, relative to ``/api/v2``."""
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    json: Any = None


@dataclass
class APIResponse:
    """Status and decoded body of a Management API call."""
    status_code: int
    reason: str
    body: Any = None
    text: str = ""
    decoded: bool = True

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ManagementAPI:
    """
    Issues bearer-authenticated requests against one tenant.

    Every call is bounded by ``timeout`` as a whole, in addition to the
    per-phase timeouts of the underlying httpx client.
    """

    def __init__(
        self,
        domain: str,
        token: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.domain = domain
        self.base_url = f"https://{domain}/api/v2"
        self.timeout = timeout
        self._token = token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def send(self, request: APIRequest) -> APIResponse:
        """
        Send a request and decode the response.

        Raises:
            httpx.TransportError: On connection level failures
            asyncio.TimeoutError: If the call outlives ``timeout``
        """
        params = {k: v for k, v in request.params.items() if v is not None}

        async with httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport
        ) as client:
            start_time = time.time()
            logger.debug(
                "Management API request",
                method=request.method,
                path=request.path,
                params=params
            )
            response = await asyncio.wait_for(
                client.request(
                    request.method,
                    self.base_url + request.path,
                    params=params or None,
                    json=request.json
                ),
                timeout=self.timeout
            )

        logger.debug(
            "Management API response",
            method=request.method,
            path=request.path,
            status=response.status_code,
            elapsed_ms=round((time.time() - start_time) * 1000, 1)
        )
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> APIResponse:
        result = APIResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            text=response.text,
        )
        if not response.content:
            return result
        try:
            result.body = response.json()
        except ValueError:
            result.decoded = False
        return result
