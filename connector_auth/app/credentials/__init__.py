"""
Application credentials package.

Holds the bot's app id and password and hands out tokens for calls to
channels. Tokens come from a token acquirer that is created lazily, once
per credentials object, and bound to the tenant at that moment.
"""

from .app_credentials import MicrosoftAppCredentials, credentials_from_config
from .auth import MicrosoftAppCredentialsAuth
from .authenticator import ClientCredentialsAuthenticator, TokenAcquirer, TokenAcquirerFactory
from .models import AuthenticationResult, ClientCredential, OAuthConfiguration
from .provider import CredentialProvider, SimpleCredentialProvider

__all__ = [
    "AuthenticationResult",
    "ClientCredential",
    "ClientCredentialsAuthenticator",
    "CredentialProvider",
    "MicrosoftAppCredentials",
    "MicrosoftAppCredentialsAuth",
    "OAuthConfiguration",
    "SimpleCredentialProvider",
    "TokenAcquirer",
    "TokenAcquirerFactory",
    "credentials_from_config",
]
