"""Shared fixtures: a fake Management API and a fake auth0 CLI."""

import asyncio
import stat
from pathlib import Path
from typing import Callable

import httpx
import pytest

from shared.config import Auth0Settings, Settings

DOMAIN = "tenant.us.auth0.com"
TOKEN = "test-token"


class FakeManagementAPI:
    """Records requests and answers them with a responder callable."""

    def __init__(self, responder: Callable) -> None:
        self.responder = responder
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.responder(request)
        if asyncio.iscoroutine(result):
            result = await result
        return result


@pytest.fixture
def fake_api() -> Callable[[Callable], FakeManagementAPI]:
    """Build a fake API from a responder."""
    return FakeManagementAPI


@pytest.fixture
def settings() -> Settings:
    """Settings with an operator supplied token and domain."""
    return Settings(
        auth0=Auth0Settings(
            token=TOKEN,
            domain=DOMAIN,
            cli_path=None,
            cli_name="auth0-not-installed",
        )
    )


@pytest.fixture
def fake_cli(tmp_path: Path) -> Callable[..., tuple[Path, Path]]:
    """
    Write an executable auth0 CLI stand-in.

    Every invocation appends a line to a counter file, so tests can tell
    how often the CLI was run.
    """
    def build(
        token: str = "cli-token",
        tenants: str = '[{"name": "dev-tenant.eu.auth0.com", "active": true}]',
        sleep: float = 0
    ) -> tuple[Path, Path]:
        counter = tmp_path / "cli-calls.txt"
        script = tmp_path / "auth0"
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$@" >> "{counter}"\n'
            + (f"exec sleep {sleep}\n" if sleep else "")
            + f'if [ "$1" = "api" ]; then echo "{token}"; exit 0; fi\n'
            + f"if [ \"$1\" = \"tenants\" ]; then echo '{tenants}'; exit 0; fi\n"
            + "exit 1\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)
        return script, counter

    return build
