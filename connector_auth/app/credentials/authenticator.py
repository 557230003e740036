"""
OAuth client-credentials token acquisition.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import httpx

from shared.errors import ExternalServiceError
from shared.logging import get_logger
from ..trust.hosts import parse_url
from ..trust.registry import as_utc, utcnow
from .models import AuthenticationResult, ClientCredential, OAuthConfiguration


class TokenAcquirer:
    """Supplies bearer tokens for one application identity and authority.

    Implementations own their caching and refresh policy.
    """

    async def acquire_token(self) -> AuthenticationResult:  # pragma: no cover - interface
        raise NotImplementedError


TokenAcquirerFactory = Callable[[ClientCredential, OAuthConfiguration], TokenAcquirer]


class ClientCredentialsAuthenticator(TokenAcquirer):
    """Requests tokens from an Azure AD style ``/oauth2/token`` endpoint.

    The authority URL is validated on construction and a
    :class:`~shared.errors.MalformedInputError` is raised if it is not an
    absolute http(s) URL. Tokens are cached until shortly before they expire.
    """

    # Refresh this long before the token actually expires, or at half its
    # lifetime for tokens that live less than twice as long
    REFRESH_MARGIN = timedelta(minutes=5)

    def __init__(
        self,
        client_credential: ClientCredential,
        oauth_configuration: OAuthConfiguration,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        authority = parse_url(oauth_configuration.authority)
        self.client_credential = client_credential
        self.oauth_configuration = oauth_configuration
        self.token_url = f"{str(authority).rstrip('/')}/oauth2/token"
        self.timeout = timeout
        self.logger = get_logger("connector_auth.authenticator")

        self._client = http_client
        self._clock = clock or utcnow
        self._lock = asyncio.Lock()
        self._cached: Optional[AuthenticationResult] = None
        self._acquired_at: Optional[datetime] = None

    async def acquire_token(self) -> AuthenticationResult:
        """Return the cached token, requesting a new one when it is about to expire."""
        if self._is_fresh(self._cached):
            return self._cached

        async with self._lock:
            # Another task may have refreshed while we waited
            if self._is_fresh(self._cached):
                return self._cached
            self._cached = await self._request_token()
            return self._cached

    def clear_cache(self) -> None:
        self._cached = None
        self._acquired_at = None

    def _is_fresh(self, result: Optional[AuthenticationResult]) -> bool:
        if result is None:
            return False
        expires_on = as_utc(result.expires_on)
        margin = self.REFRESH_MARGIN
        if self._acquired_at is not None:
            margin = min(margin, (expires_on - self._acquired_at) / 2)
        return expires_on - margin > as_utc(self._clock())

    async def _request_token(self) -> AuthenticationResult:
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_credential.app_id or "",
            "client_secret": self.client_credential.app_password or "",
            "resource": self.oauth_configuration.scope,
        }

        try:
            if self._client is not None:
                response = await self._client.post(self.token_url, data=data)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.token_url, data=data)
            response.raise_for_status()
            payload: Dict[str, Any] = response.json()
            access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 3600))
        except httpx.HTTPError as e:
            self.logger.error("Token request failed", token_url=self.token_url, error=str(e))
            raise ExternalServiceError("token-endpoint", str(e)) from e
        except (KeyError, ValueError, TypeError) as e:
            self.logger.error("Token response malformed", token_url=self.token_url, error=str(e))
            raise ExternalServiceError("token-endpoint", "Malformed token response") from e

        acquired_at = as_utc(self._clock())
        result = AuthenticationResult(
            access_token=access_token,
            token_type=payload.get("token_type", "Bearer"),
            expires_on=acquired_at + timedelta(seconds=expires_in),
        )
        self._acquired_at = acquired_at

        self.logger.info(
            "Token acquired",
            app_id=self.client_credential.app_id,
            expires_on=result.expires_on.isoformat()
        )
        return result
