"""
Identity and validation settings for inbound channel tokens.
"""

import json
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..constants import AuthenticationConstants


def _claim_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


@dataclass(frozen=True)
class ClaimsIdentity:
    """Identity established from a verified token."""

    claims: Mapping[str, str] = field(default_factory=dict)
    issuer: Optional[str] = None
    is_authenticated: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    @classmethod
    def from_token_claims(cls, claims: Mapping[str, Any]) -> "ClaimsIdentity":
        """Build an authenticated identity from decoded JWT claims."""
        values = {name: _claim_value(value) for name, value in claims.items()}
        return cls(claims=values, issuer=values.get(AuthenticationConstants.ISSUER_CLAIM))

    def get_claim(self, name: str) -> Optional[str]:
        return self.claims.get(name)


class AuthenticationConfiguration(BaseModel):
    """Extra requirements applied while extracting a channel token."""

    model_config = ConfigDict(frozen=True)

    required_endorsements: Tuple[str, ...] = ()


class TokenValidationParameters(BaseModel):
    """How a token extractor validates a JWT."""

    model_config = ConfigDict(frozen=True)

    validate_issuer: bool = True
    valid_issuers: Tuple[str, ...] = ()
    validate_audience: bool = True
    valid_audiences: Tuple[str, ...] = ()
    validate_lifetime: bool = True
    clock_skew: timedelta = timedelta(minutes=5)
    require_signed_tokens: bool = True
