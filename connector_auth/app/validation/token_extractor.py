"""
Extracts a verified identity from a channel's bearer token.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
from jose import JWTError, jwt

from shared.errors import AuthenticationError, ExternalServiceError
from shared.logging import get_logger
from .models import ClaimsIdentity, TokenValidationParameters


class ClaimsExtractor:
    """Verifies a raw ``Authorization`` header and exposes its claims."""

    async def get_identity(
        self,
        auth_header: Optional[str],
        channel_id: str,
        required_endorsements: Sequence[str] = (),
    ) -> Optional[ClaimsIdentity]:  # pragma: no cover - interface
        """Return the identity, or None if the header carries no bearer token.

        Raises:
            AuthenticationError: If a bearer token is present but invalid.
        """
        raise NotImplementedError


class JwtTokenExtractor(ClaimsExtractor):
    """Validates JWTs against signing keys published via OpenID metadata.

    Bot Framework key sets carry an ``endorsements`` list per key naming the
    channels allowed to sign with it; tokens are only accepted from keys
    endorsed for the calling channel.
    """

    def __init__(
        self,
        validation_parameters: TokenValidationParameters,
        metadata_url: str,
        allowed_signing_algorithms: Sequence[str],
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        refresh_interval: int = 24 * 60 * 60,
        timeout: float = 10.0,
    ) -> None:
        self.validation_parameters = validation_parameters
        self.metadata_url = metadata_url
        self.allowed_signing_algorithms = tuple(allowed_signing_algorithms)
        self.refresh_interval = refresh_interval
        self.timeout = timeout
        self.logger = get_logger("connector_auth.extractor")

        self._client = http_client
        self._keys: Optional[List[Dict[str, Any]]] = None
        self._last_refresh: float = 0.0
        self._lock = asyncio.Lock()

    async def get_identity(
        self,
        auth_header: Optional[str],
        channel_id: str,
        required_endorsements: Sequence[str] = (),
    ) -> Optional[ClaimsIdentity]:
        if not auth_header:
            return None

        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
            return None

        return await self.get_identity_from_token(parts[1], channel_id, required_endorsements)

    async def get_identity_from_token(
        self,
        token: str,
        channel_id: str,
        required_endorsements: Sequence[str] = (),
    ) -> ClaimsIdentity:
        """Validate a bare JWT and return its identity."""
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise AuthenticationError("Malformed token", details={"error": str(e)}) from e

        alg = header.get("alg")
        if not isinstance(alg, str):
            raise AuthenticationError("Token header missing signing algorithm")
        if self.validation_parameters.require_signed_tokens and (not alg or alg.lower() == "none"):
            raise AuthenticationError("Token is not signed")
        if alg not in self.allowed_signing_algorithms:
            raise AuthenticationError(f"Token signing algorithm '{alg}' not in allowed list")

        kid = header.get("kid")
        if not isinstance(kid, str):
            raise AuthenticationError("Token header missing key id (kid)")

        key = await self._get_key(kid)
        if key is None:
            raise AuthenticationError("Signing key not found for token", details={"kid": kid})

        self._check_endorsements(key, kid, channel_id, required_endorsements)
        claims = self._decode(token, key, alg)

        identity = ClaimsIdentity.from_token_claims(claims)
        self.logger.debug("Channel token verified", issuer=identity.issuer, channel_id=channel_id)
        return identity

    def _check_endorsements(
        self,
        key: Dict[str, Any],
        kid: str,
        channel_id: str,
        required_endorsements: Sequence[str],
    ) -> None:
        endorsements = key.get("endorsements") or []
        if channel_id and channel_id not in endorsements:
            raise AuthenticationError(
                f"Could not validate endorsement for key: {kid} with endorsements: {channel_id}",
                details={"kid": kid, "channel_id": channel_id},
            )

        missing = [value for value in required_endorsements if value not in endorsements]
        if missing:
            raise AuthenticationError(
                "Could not validate required endorsements",
                details={"kid": kid, "missing": missing},
            )

    def _decode(self, token: str, key: Dict[str, Any], alg: str) -> Dict[str, Any]:
        params = self.validation_parameters
        options = {
            "verify_aud": False,
            "verify_iss": False,
            "verify_exp": params.validate_lifetime,
            "verify_nbf": params.validate_lifetime,
            "verify_iat": params.validate_lifetime,
            "require_exp": params.validate_lifetime,
            "leeway": int(params.clock_skew.total_seconds()),
        }

        try:
            claims = jwt.decode(token, key, algorithms=[alg], options=options)
        except JWTError as e:
            raise AuthenticationError("JWT validation failed", details={"error": str(e)}) from e

        # Issuer and audience are matched here so several values can be accepted
        if params.validate_issuer and claims.get("iss") not in params.valid_issuers:
            raise AuthenticationError("JWT validation failed", details={"error": "Invalid issuer"})

        if params.validate_audience:
            audiences = claims.get("aud")
            if isinstance(audiences, str):
                audiences = [audiences]
            if not any(aud in params.valid_audiences for aud in audiences or []):
                raise AuthenticationError("JWT validation failed", details={"error": "Invalid audience"})

        return claims

    async def _get_key(self, kid: str) -> Optional[Dict[str, Any]]:
        """Return the signing key matching ``kid``, refreshing once on a miss."""
        await self._refresh_keys(force=False)
        for key in self._keys or []:
            if key.get("kid") == kid:
                return key

        # Key might be rotated; refresh once more eagerly.
        await self._refresh_keys(force=True)
        for key in self._keys or []:
            if key.get("kid") == kid:
                return key

        self.logger.warning("Signing key not found", kid=kid)
        return None

    async def _refresh_keys(self, *, force: bool) -> None:
        if not force and self._keys is not None and (time.monotonic() - self._last_refresh) < self.refresh_interval:
            return

        async with self._lock:
            if not force and self._keys is not None and (time.monotonic() - self._last_refresh) < self.refresh_interval:
                return

            try:
                metadata = await self._get_json(self.metadata_url)
                jwks_uri = metadata.get("jwks_uri")
                if not isinstance(jwks_uri, str):
                    raise ExternalServiceError("openid-metadata", "Metadata missing 'jwks_uri'")
                payload = await self._get_json(jwks_uri)
            except httpx.HTTPError as e:
                self.logger.error("Failed to fetch signing keys", metadata_url=self.metadata_url, error=str(e))
                raise ExternalServiceError("openid-metadata", str(e)) from e

            keys = payload.get("keys")
            if not isinstance(keys, list):
                raise ExternalServiceError("openid-metadata", "JWKS response missing 'keys' array")
            if not all(isinstance(key, dict) for key in keys):
                raise ExternalServiceError("openid-metadata", "JWKS response contains a non-object key")

            self._keys = keys
            self._last_refresh = time.monotonic()
            self.logger.info("Signing keys refreshed", keys_count=len(keys))

    async def _get_json(self, url: str) -> Dict[str, Any]:
        if self._client is not None:
            response = await self._client.get(url)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError("openid-metadata", f"Invalid JSON from {url}") from e
        if not isinstance(payload, dict):
            raise ExternalServiceError("openid-metadata", f"Unexpected payload from {url}")
        return payload
