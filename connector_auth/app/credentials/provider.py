"""
Credential providers decide which app ids a bot accepts tokens for.
"""

from typing import Optional


class CredentialProvider:
    """Validates app ids presented in channel tokens.

    Multi-tenant bots may look app ids up in a remote store, hence the
    async interface.
    """

    async def is_valid_app_id(self, app_id: str) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    async def get_app_password(self, app_id: str) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    async def is_authentication_disabled(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError


class SimpleCredentialProvider(CredentialProvider):
    """Accepts a single configured app id."""

    def __init__(self, app_id: Optional[str] = None, password: Optional[str] = None) -> None:
        self.app_id = app_id
        self.password = password

    async def is_valid_app_id(self, app_id: str) -> bool:
        return bool(self.app_id) and app_id == self.app_id

    async def get_app_password(self, app_id: str) -> Optional[str]:
        return self.password if await self.is_valid_app_id(app_id) else None

    async def is_authentication_disabled(self) -> bool:
        return not self.app_id
