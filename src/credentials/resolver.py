"""Credential resolution for the Auth0 Management API.

A token is looked up in order: operator supplied environment, the
in-memory cache, the auth0 CLI (``auth0 api get-token``) and finally the
CLI's own configuration files. The tenant domain follows its own chain:
environment, ``auth0 tenants list --json``, configuration file.
"""

import asyncio
import json
import os
import shutil
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from shared.config import Settings
from shared.logging import get_logger
from shared.models import Credential
from credentials.cache import TokenCache

logger = get_logger(__name__)

DEFAULT_DOMAIN_SUFFIX = ".us.auth0.com"


class CredentialError(Exception):
    """Base error for credential problems."""


class TokenRetrievalError(CredentialError):
    """Every token or domain source was exhausted."""


def format_domain(domain: str) -> str:
    """
    Normalize a tenant domain.

    A bare tenant label gets the default region suffix; anything that
    already contains a dot is returned unchanged, so the function is
    idempotent.
    """
    if not domain or "." in domain:
        return domain
    return f"{domain}{DEFAULT_DOMAIN_SUFFIX}"


def redact_token(token: Optional[str]) -> str:
    """Describe a token for logs without revealing it."""
    if not token:
        return "<empty>"
    if len(token) <= 12:
        return f"<{len(token)} chars>"
    return f"{token[:4]}...{token[-4:]} ({len(token)} chars)"


def default_config_paths() -> list[Path]:
    """Locations where the auth0 CLI stores its configuration."""
    home = Path.home()
    return [
        home / ".config" / "auth0" / "config.json",
        home / ".auth0" / "config.json",
    ]


def _text(value: Any) -> Optional[str]:
    """Return a non-empty string value, or None for anything else."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class TokenResult:
    """A resolved token and where it came from."""
    token: str
    source: str
    expires_at: Optional[datetime] = None


class CredentialResolver:
    """
    Resolves a Management API token and tenant domain.

    The resolver owns its token cache. Only ``TokenRetrievalError`` leaves
    it; every other failure along the chain is logged and the next source
    is tried.
    """

    def __init__(
        self,
        settings: Settings,
        cache: Optional[TokenCache] = None,
        config_paths: Optional[list[Path]] = None
    ) -> None:
        self.settings = settings
        self.cache = cache or TokenCache(
            ttl=timedelta(seconds=settings.auth0.token_cache_ttl_seconds)
        )
        self.config_paths = config_paths if config_paths is not None else default_config_paths()
        # Domain resolved alongside the cached token
        self._cached_domain: Optional[str] = None

    async def resolve(self, force_refresh: bool = False) -> Credential:
        """
        Resolve a complete credential.

        Args:
            force_refresh: Skip the environment token and the cache

        Returns:
            A credential with a fully qualified domain

        Raises:
            TokenRetrievalError: If no token or no domain could be found
        """
        result = await self.resolve_token(force_refresh=force_refresh)
        if result.source == "cache" and self._cached_domain:
            domain = self._cached_domain
        else:
            self._cached_domain = None
            domain = await self.resolve_domain()
            self._cached_domain = domain

        credential = Credential(
            token=result.token,
            domain=domain,
            tenant_label=self._tenant_label(domain),
            source=result.source,
            expires_at=result.expires_at,
        )
        logger.info(
            "Credential resolved",
            source=credential.source,
            domain=credential.domain,
            tenant=credential.tenant_label,
            token=redact_token(credential.token)
        )
        return credential

    async def resolve_token(self, force_refresh: bool = False) -> TokenResult:
        """Walk the token sources in order and return the first hit."""
        auth0 = self.settings.auth0

        if not force_refresh:
            if auth0.token:
                logger.debug("Using token from environment", token=redact_token(auth0.token))
                return TokenResult(token=auth0.token, source="environment")

            cached = self.cache.get()
            if cached:
                logger.debug("Using cached token", token=redact_token(cached))
                return TokenResult(token=cached, source="cache", expires_at=self.cache.expires_at)
        else:
            logger.debug("Forced refresh, skipping environment token and cache")
            self.cache.invalidate()

        for binary in self.cli_candidates():
            token = await self._run_cli(binary, ["api", "get-token"])
            if token:
                logger.debug("Token retrieved from CLI", cli=binary, token=redact_token(token))
                entry = self.cache.set(token)
                return TokenResult(token=token, source="cli", expires_at=entry.expires_at)

        token = self._token_from_config()
        if token:
            entry = self.cache.set(token)
            return TokenResult(token=token, source="config_file", expires_at=entry.expires_at)

        raise TokenRetrievalError(
            "Unable to retrieve an Auth0 token. Run `auth0 login` or set "
            "AUTH0_TOKEN and AUTH0_DOMAIN."
        )

    async def resolve_domain(self) -> str:
        """Resolve the tenant domain, normalized with ``format_domain``."""
        if self.settings.auth0.domain:
            return format_domain(self.settings.auth0.domain)

        for binary in self.cli_candidates():
            output = await self._run_cli(binary, ["tenants", "list", "--json"])
            domain = self._domain_from_tenant_list(output) if output else None
            if domain:
                logger.debug("Domain resolved from CLI tenant list", cli=binary, domain=domain)
                return format_domain(domain)

        domain = self._domain_from_config()
        if domain:
            return format_domain(domain)

        raise TokenRetrievalError(
            "Unable to determine the Auth0 tenant domain. Set AUTH0_DOMAIN "
            "or run `auth0 login`."
        )

    def cli_candidates(self) -> list[str]:
        """
        Return auth0 CLI executables in the order they should be tried.

        Debug mode prefers the operator supplied local path; otherwise the
        binary found on PATH goes first.
        """
        auth0 = self.settings.auth0
        local: Optional[str] = None
        if auth0.cli_path:
            if Path(auth0.cli_path).is_file():
                local = auth0.cli_path
            else:
                logger.debug("AUTH0_CLI_PATH does not exist", path=auth0.cli_path)

        on_path = shutil.which(auth0.cli_name)

        ordered = [local, on_path] if self.settings.debug else [on_path, local]
        candidates: list[str] = []
        for binary in ordered:
            if binary and binary not in candidates:
                candidates.append(binary)
        return candidates

    async def _run_cli(self, binary: str, args: list[str]) -> Optional[str]:
        """
        Run the auth0 CLI and return its trimmed stdout.

        Returns None on a missing binary, non-zero exit, empty output or
        timeout. A process that outlives the timeout is killed.
        """
        timeout = self.settings.auth0.cli_timeout_seconds
        env = {**os.environ, "HOME": os.environ.get("HOME") or str(Path.home())}
        command = [binary, *args]

        logger.debug("Running auth0 CLI", command=command)

        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env
            )
        except OSError as e:
            logger.debug("auth0 CLI could not be started", cli=binary, error=str(e))
            return None

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning("auth0 CLI timed out", cli=binary, timeout_seconds=timeout)
            return None

        if proc.returncode != 0:
            logger.debug(
                "auth0 CLI failed",
                cli=binary,
                return_code=proc.returncode,
                stderr=stderr.decode("utf-8", errors="replace").strip()
            )
            return None

        output = stdout.decode("utf-8", errors="replace").strip()
        return output or None

    def _iter_configs(self) -> Iterator[tuple[Path, dict[str, Any]]]:
        """Yield every auth0 CLI configuration file that parses to an object."""
        for path in self.config_paths:
            if not path.exists():
                logger.debug("auth0 CLI config not found", path=str(path))
                continue
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning("Unreadable auth0 CLI config", path=str(path), error=str(e))
                continue
            if isinstance(data, dict):
                logger.debug("Loaded auth0 CLI config", path=str(path))
                yield path, data
            else:
                logger.warning("auth0 CLI config is not an object", path=str(path))

    def _default_tenant(self, data: dict[str, Any]) -> tuple[Optional[str], dict[str, Any]]:
        name = _text(data.get("default_tenant"))
        tenants = data.get("tenants")
        if not name or not isinstance(tenants, dict):
            return name, {}
        tenant = tenants.get(name)
        return name, tenant if isinstance(tenant, dict) else {}

    def _token_from_config(self) -> Optional[str]:
        for path, data in self._iter_configs():
            token = self._token_from_config_data(data)
            if token:
                logger.debug("Token found in auth0 CLI config", path=str(path))
                return token
        return None

    def _token_from_config_data(self, data: dict[str, Any]) -> Optional[str]:
        token = _text(data.get("access_token"))
        if token:
            return token

        name, tenant = self._default_tenant(data)
        token = _text(tenant.get("access_token"))
        if not token:
            logger.debug("No token for default tenant in auth0 CLI config", tenant=name)
            return None

        expires_at = _parse_timestamp(tenant.get("expires_at"))
        if expires_at is not None and expires_at <= datetime.now(timezone.utc):
            logger.warning(
                "auth0 CLI token is expired, run `auth0 login` to refresh it",
                tenant=name,
                expired_at=expires_at.isoformat()
            )
            return None
        return token

    def _domain_from_tenant_list(self, output: str) -> Optional[str]:
        try:
            tenants = json.loads(output)
        except json.JSONDecodeError:
            logger.debug("auth0 tenants list returned invalid JSON")
            return None
        if not isinstance(tenants, list) or not tenants:
            return None

        active = next(
            (t for t in tenants if isinstance(t, dict) and t.get("active")),
            tenants[0]
        )
        if not isinstance(active, dict):
            return None
        return _text(active.get("name")) or _text(active.get("domain"))

    def _domain_from_config(self) -> Optional[str]:
        for path, data in self._iter_configs():
            name, tenant = self._default_tenant(data)
            domain = _text(tenant.get("domain")) or name
            if domain:
                logger.debug("Domain found in auth0 CLI config", path=str(path))
                return domain
        return None

    def _tenant_label(self, domain: str) -> str:
        if self.settings.auth0.tenant_name:
            return self.settings.auth0.tenant_name
        for _, data in self._iter_configs():
            name = _text(data.get("default_tenant"))
            if name:
                return name.split(".")[0]
        return domain.split(".")[0] or "default"
