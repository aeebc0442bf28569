"""OpenID Connect authorisation code flow against a discovered provider."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt

from penguin_nurse.core.db import utcnow
from penguin_nurse.core.settings import OidcConfig
from penguin_nurse.services.users import OidcUserInfo

logger = logging.getLogger(__name__)

WELL_KNOWN = "/.well-known/openid-configuration"


class OidcError(Exception):
    pass


def discovery_document_url(discovery_url: str) -> str:
    if discovery_url.rstrip("/").endswith(WELL_KNOWN):
        return discovery_url
    return discovery_url.rstrip("/") + WELL_KNOWN


@dataclass
class OidcClient:
    config: OidcConfig
    metadata: dict[str, Any]
    jwks: dict[str, Any]
    discovered_at: datetime = field(default_factory=utcnow)

    @classmethod
    async def discover(cls, config: OidcConfig, http: Optional[httpx.AsyncClient] = None) -> "OidcClient":
        if not config.discovery_url:
            raise OidcError("OIDC is not configured")

        owns_client = http is None
        http = http or httpx.AsyncClient(timeout=config.timeout_seconds)
        try:
            response = await http.get(discovery_document_url(config.discovery_url))
            response.raise_for_status()
            metadata = response.json()
            for key in ("issuer", "authorization_endpoint", "token_endpoint", "jwks_uri"):
                if not metadata.get(key):
                    raise OidcError(f"Provider metadata missing {key}")

            jwks_response = await http.get(metadata["jwks_uri"])
            jwks_response.raise_for_status()
            jwks = jwks_response.json()
        except httpx.HTTPError as exc:
            raise OidcError(f"Discovery failed: {exc}") from exc
        finally:
            if owns_client:
                await http.aclose()

        logger.info("Discovered OIDC provider %s", metadata["issuer"])
        return cls(config=config, metadata=metadata, jwks=jwks)

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return now - self.discovered_at >= timedelta(minutes=self.config.refresh_minutes)

    def auth_url(self, origin: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "scope": self.config.auth_scope,
            "state": origin,
        }
        return f"{self.metadata['authorization_endpoint']}?{urlencode(params)}"

    def _decode_id_token(self, id_token: str, access_token: Optional[str]) -> dict[str, Any]:
        algorithms = self.metadata.get("id_token_signing_alg_values_supported") or ["RS256"]
        try:
            return jwt.decode(
                id_token,
                self.jwks,
                algorithms=algorithms,
                audience=self.config.client_id,
                issuer=self.metadata["issuer"],
                access_token=access_token,
            )
        except JWTError as exc:
            raise OidcError(f"Invalid ID token: {exc}") from exc

    async def login(self, code: str, http: Optional[httpx.AsyncClient] = None) -> OidcUserInfo:
        owns_client = http is None
        http = http or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        try:
            token_response = await http.post(
                self.metadata["token_endpoint"],
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.config.redirect_uri,
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                },
                headers={"Accept": "application/json"},
            )
            if token_response.status_code >= 400:
                raise OidcError(f"Token request failed with status {token_response.status_code}")
            tokens = token_response.json()

            id_token = tokens.get("id_token")
            if not id_token:
                raise OidcError("No token")
            access_token = tokens.get("access_token")
            claims = self._decode_id_token(id_token, access_token)
            groups = claims.get("groups") or []

            userinfo_endpoint = self.metadata.get("userinfo_endpoint")
            if userinfo_endpoint and access_token:
                info_response = await http.get(
                    userinfo_endpoint, headers={"Authorization": f"Bearer {access_token}"}
                )
                if info_response.status_code >= 400:
                    raise OidcError(f"User info request failed with status {info_response.status_code}")
                info = info_response.json()
            else:
                info = claims
        except httpx.HTTPError as exc:
            raise OidcError(f"Provider request failed: {exc}") from exc
        finally:
            if owns_client:
                await http.aclose()

        values = {}
        for key in ("sub", "name", "email"):
            value = info.get(key)
            if not value:
                raise OidcError(f"User info missing {key}")
            values[key] = str(value)

        if values["sub"] != str(claims.get("sub")):
            raise OidcError("User info subject does not match ID token")

        return OidcUserInfo(
            sub=values["sub"],
            name=values["name"],
            email=values["email"],
            is_admin="admin" in groups,
        )


_client: Optional[OidcClient] = None


def get_oidc_client() -> Optional[OidcClient]:
    return _client


def set_oidc_client(client: Optional[OidcClient]) -> None:
    global _client
    _client = client


async def refresh_oidc_client(config: OidcConfig, force: bool = False) -> Optional[OidcClient]:
    """Rediscover the provider when missing or stale; keep the old client on failure."""
    if not config.enabled:
        set_oidc_client(None)
        return None

    current = get_oidc_client()
    if current is not None and not force and not current.is_stale():
        return current

    try:
        client = await OidcClient.discover(config)
    except OidcError as exc:
        logger.error("OIDC client refresh failed: %s", exc)
        return current

    set_oidc_client(client)
    return client
