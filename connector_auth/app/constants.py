"""
Well-known endpoints, scopes and claim names used by the Bot Framework.
"""


class AuthenticationConstants:
    """Public cloud values."""

    # TO CHANNEL FROM BOT: Login URL template, formatted with the tenant
    TO_CHANNEL_FROM_BOT_LOGIN_URL_TEMPLATE = "https://login.microsoftonline.com/{}"
    DEFAULT_CHANNEL_AUTH_TENANT = "botframework.com"

    # TO CHANNEL FROM BOT: OAuth scope to request
    TO_CHANNEL_FROM_BOT_OAUTH_SCOPE = "https://api.botframework.com"

    # Application settings keys
    MICROSOFT_APP_ID_KEY = "MicrosoftAppId"
    MICROSOFT_APP_PASSWORD_KEY = "MicrosoftAppPassword"

    AUDIENCE_CLAIM = "aud"
    ISSUER_CLAIM = "iss"
    SERVICE_URL_CLAIM = "serviceurl"
    APP_ID_CLAIM = "appid"
    VERSION_CLAIM = "ver"

    ALLOWED_SIGNING_ALGORITHMS = ("RS256", "RS384", "RS512")


class GovernmentAuthenticationConstants:
    """US Government cloud values."""

    TO_CHANNEL_FROM_BOT_LOGIN_URL = "https://login.microsoftonline.us/MicrosoftServices.onmicrosoft.com"
    TO_CHANNEL_FROM_BOT_OAUTH_SCOPE = "https://api.botframework.us"

    TO_BOT_FROM_CHANNEL_TOKEN_ISSUER = "https://api.botframework.us"
    TO_BOT_FROM_CHANNEL_OPENID_METADATA_URL = "https://login.botframework.azure.us/v1/.well-known/openidconfiguration"


# Hosts trusted for token attachment without an explicit trust call
DEFAULT_TRUSTED_HOSTS = (
    "api.botframework.com",
    "token.botframework.com",
    "api.botframework.azure.us",
    "token.botframework.azure.us",
)
