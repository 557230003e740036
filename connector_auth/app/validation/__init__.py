"""
Channel token validation package.

Inbound requests carry a JWT issued by the channel service. Validation is
split in two:

- A claims extractor verifies signature, lifetime, issuer and signing key
  endorsements, producing a ClaimsIdentity.
- A channel policy (e.g. GovernmentChannelValidation) then checks the
  issuer, the app id in the audience claim and the service URL binding.

Every policy failure raises shared.errors.AuthenticationError.
"""

from .government_channel import GOVERNMENT_TOKEN_VALIDATION_PARAMETERS, GovernmentChannelValidation
from .models import AuthenticationConfiguration, ClaimsIdentity, TokenValidationParameters
from .token_extractor import ClaimsExtractor, JwtTokenExtractor

__all__ = [
    "AuthenticationConfiguration",
    "ClaimsExtractor",
    "ClaimsIdentity",
    "GOVERNMENT_TOKEN_VALIDATION_PARAMETERS",
    "GovernmentChannelValidation",
    "JwtTokenExtractor",
    "TokenValidationParameters",
]
