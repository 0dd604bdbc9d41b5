"""Verification of session tokens issued by the external identity provider.

Tokens are RS256 JWTs signed with keys published at the provider's JWKS
endpoint. Only standard OIDC profile claims are mapped onto the local user.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx
from jose import JWTError, jwt
import structlog

from app.core.config import get_settings

logger = structlog.get_logger(__name__)

MIN_JWKS_TTL_SECONDS = 60


@dataclass(frozen=True)
class ExternalIdentity:
    subject: str
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None


class IdentityTokenError(ValueError):
    pass


class IdentityConfigError(IdentityTokenError):
    pass


@dataclass(frozen=True)
class IdentityProviderConfig:
    issuer: str
    jwks_url: str
    authorized_parties: list[str]
    audience: str | None
    jwks_ttl_seconds: int

    @classmethod
    def from_settings(cls) -> "IdentityProviderConfig":
        settings = get_settings()
        if not settings.identity_enabled:
            raise IdentityConfigError("External identity provider is not enabled on this API.")

        issuer = _clean(settings.identity_issuer)
        if not issuer:
            raise IdentityConfigError("IDENTITY_ISSUER is required when identity auth is enabled.")
        issuer = issuer.rstrip("/")

        return cls(
            issuer=issuer,
            jwks_url=_clean(settings.identity_jwks_url) or f"{issuer}/.well-known/jwks.json",
            authorized_parties=settings.identity_authorized_party_list,
            audience=_clean(settings.identity_jwt_audience),
            jwks_ttl_seconds=max(settings.identity_jwks_cache_ttl_seconds, MIN_JWKS_TTL_SECONDS),
        )


class JwksCache:
    """Signing keys per JWKS URL, refetched once their TTL lapses."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._entries: dict[str, tuple[float, list[dict[str, Any]]]] = {}

    def _fresh(self, url: str) -> list[dict[str, Any]] | None:
        entry = self._entries.get(url)
        if entry and entry[0] > time.monotonic():
            return entry[1]
        return None

    async def keys(self, url: str, ttl_seconds: int) -> list[dict[str, Any]]:
        cached = self._fresh(url)
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._fresh(url)
            if cached is not None:
                return cached
            keys = await self._fetch(url)
            self._entries[url] = (time.monotonic() + ttl_seconds, keys)
            return keys

    async def _fetch(self, url: str) -> list[dict[str, Any]]:
        try:
            async with httpx.AsyncClient(timeout=8.0) as client:
                response = await client.get(url)
                response.raise_for_status()
                document = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("jwks_fetch_failed", jwks_url=url, error=str(exc))
            raise IdentityTokenError("Unable to fetch identity provider signing keys.") from exc

        keys = document.get("keys") if isinstance(document, dict) else None
        if not isinstance(keys, list) or not keys:
            raise IdentityTokenError("Invalid identity provider JWKS response.")
        return [key for key in keys if isinstance(key, dict)]

    def clear(self) -> None:
        self._entries.clear()


jwks_cache = JwksCache()


def _clean(value: Any) -> str | None:
    text = str(value).strip() if value is not None else ""
    return text or None


def signing_key_for(token: str, keys: list[dict[str, Any]]) -> dict[str, Any]:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as exc:
        raise IdentityTokenError("Invalid identity session token.") from exc

    if kid is None:
        if len(keys) == 1:
            return keys[0]
        raise IdentityTokenError("Identity token is missing key id.")

    for key in keys:
        if key.get("kid") == kid:
            return key
    raise IdentityTokenError("Unable to find matching signing key.")


def identity_from_claims(claims: dict[str, Any]) -> ExternalIdentity:
    subject = _clean(claims.get("sub"))
    if not subject:
        raise IdentityTokenError("Invalid identity token subject.")

    first_name = _clean(claims.get("given_name"))
    last_name = _clean(claims.get("family_name"))
    if not (first_name or last_name):
        full_name = _clean(claims.get("name"))
        if full_name:
            first_name, _, rest = full_name.partition(" ")
            last_name = rest.strip() or None

    email = _clean(claims.get("email"))
    return ExternalIdentity(
        subject=subject,
        email=email.lower() if email else None,
        first_name=first_name,
        last_name=last_name,
        profile_image_url=_clean(claims.get("picture")),
    )


async def verify_identity_token(token: str) -> ExternalIdentity:
    token = _clean(token) or ""
    if not token:
        raise IdentityTokenError("Missing identity session token.")

    config = IdentityProviderConfig.from_settings()
    keys = await jwks_cache.keys(config.jwks_url, config.jwks_ttl_seconds)
    try:
        claims = jwt.decode(
            token,
            signing_key_for(token, keys),
            algorithms=["RS256"],
            audience=config.audience,
            # Issuer is compared below after trailing-slash normalization.
            options={"verify_aud": config.audience is not None, "verify_iss": False},
        )
    except JWTError as exc:
        raise IdentityTokenError("Invalid identity session token.") from exc

    issuer = _clean(claims.get("iss"))
    if not issuer or issuer.rstrip("/") != config.issuer:
        raise IdentityTokenError("Invalid identity token issuer.")
    if config.authorized_parties and _clean(claims.get("azp")) not in config.authorized_parties:
        raise IdentityTokenError("Invalid identity token authorized party.")

    return identity_from_claims(claims)
