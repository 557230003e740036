"""
Models exchanged with OAuth token acquirers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClientCredential(BaseModel):
    """Application identity used in a client-credentials grant."""

    app_id: Optional[str] = None
    app_password: Optional[str] = Field(default=None, repr=False)


class OAuthConfiguration(BaseModel):
    """Authority and scope a token is requested from."""

    authority: str
    scope: str


class AuthenticationResult(BaseModel):
    """Bearer token returned by a token acquirer."""

    access_token: str = Field(repr=False)
    token_type: str = "Bearer"
    expires_on: datetime
