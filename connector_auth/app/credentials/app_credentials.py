"""
Application credentials used by a bot to call a channel.
"""

import threading
from functools import partial
from datetime import datetime
from typing import Optional

from shared.config import ConnectorAuthConfig
from shared.errors import InternalConfigurationError, MalformedInputError
from shared.logging import get_logger
from ..constants import AuthenticationConstants
from ..trust.hosts import UrlLike, parse_url
from ..trust.registry import TrustedHostRegistry
from .authenticator import ClientCredentialsAuthenticator, TokenAcquirer, TokenAcquirerFactory
from .models import AuthenticationResult, ClientCredential, OAuthConfiguration


def _endpoint_for(tenant: Optional[str]) -> str:
    if tenant is None:
        tenant = AuthenticationConstants.DEFAULT_CHANNEL_AUTH_TENANT
    return AuthenticationConstants.TO_CHANNEL_FROM_BOT_LOGIN_URL_TEMPLATE.format(tenant)


class MicrosoftAppCredentials:
    """App id and password of a bot, plus the tenant its tokens come from.

    Tokens are only handed out for destinations the shared
    :class:`TrustedHostRegistry` trusts; callers must check
    :meth:`should_attach_token` before sending a token anywhere.
    """

    def __init__(
        self,
        app_id: Optional[str],
        app_password: Optional[str],
        channel_auth_tenant: Optional[str] = None,
        *,
        trusted_hosts: TrustedHostRegistry,
        token_acquirer_factory: Optional[TokenAcquirerFactory] = None,
    ) -> None:
        """
        Raises:
            MalformedInputError: If ``channel_auth_tenant`` does not produce a
                well-formed authority URL.
        """
        self.app_id = app_id
        self.app_password = app_password
        self.trusted_hosts = trusted_hosts
        self.logger = get_logger("connector_auth.credentials")

        self._token_acquirer_factory = token_acquirer_factory or ClientCredentialsAuthenticator
        self._authenticator: Optional[TokenAcquirer] = None
        self._authenticator_lock = threading.Lock()

        self._channel_auth_tenant: Optional[str] = None
        if channel_auth_tenant is not None:
            parse_url(_endpoint_for(channel_auth_tenant))
            self._channel_auth_tenant = channel_auth_tenant

    @classmethod
    def empty(cls, trusted_hosts: TrustedHostRegistry) -> "MicrosoftAppCredentials":
        """Anonymous credentials, used when authentication is disabled."""
        return cls(None, None, trusted_hosts=trusted_hosts)

    @property
    def is_anonymous(self) -> bool:
        return not self.app_id

    @property
    def channel_auth_tenant(self) -> str:
        if self._channel_auth_tenant is None:
            return AuthenticationConstants.DEFAULT_CHANNEL_AUTH_TENANT
        return self._channel_auth_tenant

    def set_channel_auth_tenant(self, tenant: Optional[str]) -> None:
        """Switch tenants, keeping the current one if ``tenant`` is malformed.

        Has no effect on tokens once :meth:`get_token` has been called; the
        token acquirer is bound to the authority it was created with.
        """
        try:
            parse_url(_endpoint_for(tenant))
        except MalformedInputError as e:
            self.logger.warning(
                "Ignoring malformed channel auth tenant",
                tenant=tenant,
                current_tenant=self.channel_auth_tenant,
                error=e.message
            )
            return

        self._channel_auth_tenant = tenant
        if self._authenticator is not None:
            self.logger.debug(
                "Tenant changed after token acquirer was created; tokens still use the original authority",
                tenant=self.channel_auth_tenant
            )

    def with_app_id(self, app_id: Optional[str]) -> "MicrosoftAppCredentials":
        self.app_id = app_id
        return self

    def with_app_password(self, app_password: Optional[str]) -> "MicrosoftAppCredentials":
        self.app_password = app_password
        return self

    def with_channel_auth_tenant(self, tenant: Optional[str]) -> "MicrosoftAppCredentials":
        self.set_channel_auth_tenant(tenant)
        return self

    def oauth_endpoint(self) -> str:
        return _endpoint_for(self._channel_auth_tenant)

    def oauth_scope(self) -> str:
        return AuthenticationConstants.TO_CHANNEL_FROM_BOT_OAUTH_SCOPE

    def should_attach_token(self, url: UrlLike) -> bool:
        """True if a token may be sent to ``url``."""
        return self.trusted_hosts.is_trusted(url)

    def trust_service_url(self, url: UrlLike, expires_at: Optional[datetime] = None) -> None:
        self.trusted_hosts.trust(url, expires_at)

    async def get_token(self) -> AuthenticationResult:
        """Get a bearer token for calls to the channel.

        The token acquirer is created on first use and kept for the lifetime
        of these credentials, so later tenant changes are not picked up.

        Raises:
            InternalConfigurationError: If the acquirer rejects the authority.
        """
        return await self._get_authenticator().acquire_token()

    def _get_authenticator(self) -> TokenAcquirer:
        if self._authenticator is not None:
            return self._authenticator

        with self._authenticator_lock:
            if self._authenticator is None:
                authority = self.oauth_endpoint()
                try:
                    self._authenticator = self._token_acquirer_factory(
                        ClientCredential(app_id=self.app_id, app_password=self.app_password),
                        OAuthConfiguration(authority=authority, scope=self.oauth_scope()),
                    )
                except MalformedInputError as e:
                    # The authority was validated when the tenant was set
                    self.logger.error(
                        "Token acquirer rejected a validated authority",
                        authority=authority,
                        error=e.message
                    )
                    raise InternalConfigurationError(
                        "Unable to create token acquirer",
                        details={"authority": authority}
                    ) from e
            return self._authenticator


def credentials_from_config(
    config: ConnectorAuthConfig,
    trusted_hosts: TrustedHostRegistry,
    token_acquirer_factory: Optional[TokenAcquirerFactory] = None,
) -> MicrosoftAppCredentials:
    """Build credentials from settings.

    Raises:
        MalformedInputError: If the configured tenant is malformed.
    """
    if token_acquirer_factory is None:
        token_acquirer_factory = partial(ClientCredentialsAuthenticator, timeout=config.http_timeout)
    return MicrosoftAppCredentials(
        config.microsoft_app_id,
        config.microsoft_app_password,
        config.channel_auth_tenant,
        trusted_hosts=trusted_hosts,
        token_acquirer_factory=token_acquirer_factory,
    )
