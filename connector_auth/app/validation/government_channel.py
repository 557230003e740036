"""
TO BOT FROM GOVERNMENT CHANNEL: validation of tokens sent by the US
Government cloud Bot Framework channel service.
"""

from datetime import timedelta
from typing import Optional

from shared.config import ConnectorAuthConfig
from shared.errors import AuthenticationError
from shared.logging import get_logger, set_channel_context
from ..constants import AuthenticationConstants, GovernmentAuthenticationConstants
from ..credentials.provider import CredentialProvider
from .models import AuthenticationConfiguration, ClaimsIdentity, TokenValidationParameters
from .token_extractor import ClaimsExtractor, JwtTokenExtractor

GOVERNMENT_TOKEN_VALIDATION_PARAMETERS = TokenValidationParameters(
    validate_issuer=True,
    valid_issuers=(GovernmentAuthenticationConstants.TO_BOT_FROM_CHANNEL_TOKEN_ISSUER,),
    validate_audience=False,
    validate_lifetime=True,
    clock_skew=timedelta(minutes=5),
    require_signed_tokens=True,
)


class GovernmentChannelValidation:
    """Validates the Authorization header of requests from the government channel."""

    def __init__(self, extractor: Optional[ClaimsExtractor] = None) -> None:
        self.extractor = extractor or JwtTokenExtractor(
            GOVERNMENT_TOKEN_VALIDATION_PARAMETERS,
            GovernmentAuthenticationConstants.TO_BOT_FROM_CHANNEL_OPENID_METADATA_URL,
            AuthenticationConstants.ALLOWED_SIGNING_ALGORITHMS,
        )
        self.logger = get_logger("connector_auth.government_channel")

    @classmethod
    def from_config(cls, config: ConnectorAuthConfig) -> "GovernmentChannelValidation":
        return cls(JwtTokenExtractor(
            GOVERNMENT_TOKEN_VALIDATION_PARAMETERS,
            GovernmentAuthenticationConstants.TO_BOT_FROM_CHANNEL_OPENID_METADATA_URL,
            AuthenticationConstants.ALLOWED_SIGNING_ALGORITHMS,
            refresh_interval=config.openid_refresh_interval,
            timeout=config.http_timeout,
        ))

    async def authenticate_token(
        self,
        auth_header: Optional[str],
        credentials: CredentialProvider,
        service_url: Optional[str],
        channel_id: str,
        auth_config: Optional[AuthenticationConfiguration] = None,
    ) -> ClaimsIdentity:
        """Validate the incoming Auth Header as a token sent from the government channel.

        Args:
            auth_header: The raw HTTP header in the format ``Bearer [longString]``.
            credentials: The user defined set of valid credentials, such as the AppId.
            service_url: The service url from the request.
            channel_id: The ID of the channel to validate.
            auth_config: Endorsements required of the signing key.

        Raises:
            AuthenticationError: Authentication failed.
        """
        set_channel_context(channel_id=channel_id)
        auth_config = auth_config or AuthenticationConfiguration()
        identity = await self.extractor.get_identity(
            auth_header, channel_id, auth_config.required_endorsements
        )
        return await self.validate_identity(identity, credentials, service_url)

    async def validate_identity(
        self,
        identity: Optional[ClaimsIdentity],
        credentials: CredentialProvider,
        service_url: Optional[str],
    ) -> ClaimsIdentity:
        """Check an extracted identity against the government channel's policy.

        Returns the identity unchanged when every check passes.

        Raises:
            AuthenticationError: Validation failed.
        """
        if identity is None or not identity.is_authenticated:
            raise self._reject("Invalid Identity")

        if (identity.issuer or "").lower() != GovernmentAuthenticationConstants.TO_BOT_FROM_CHANNEL_TOKEN_ISSUER.lower():
            raise self._reject("Wrong Issuer", issuer=identity.issuer)

        # The Bot Framework passes the AppId in the audience claim
        app_id = identity.get_claim(AuthenticationConstants.AUDIENCE_CLAIM)
        if not app_id:
            raise self._reject("No Audience Claim")

        if not await credentials.is_valid_app_id(app_id):
            raise self._reject(f"Invalid AppId passed on token: '{app_id}'.", app_id=app_id)
        set_channel_context(app_id=app_id)

        service_url_claim = identity.get_claim(AuthenticationConstants.SERVICE_URL_CLAIM)
        if not service_url:
            raise self._reject(f"Invalid serviceurl passed on token: '{service_url or ''}'.")

        if service_url != service_url_claim:
            raise self._reject(
                f"serviceurl doesn't match claim: '{service_url_claim}'.",
                service_url=service_url,
                service_url_claim=service_url_claim,
            )

        return identity

    def _reject(self, reason: str, **details) -> AuthenticationError:
        self.logger.warning("Channel token rejected", reason=reason, **details)
        return AuthenticationError(reason, details=details)
