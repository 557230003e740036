"""
Unit tests for MicrosoftAppCredentialsAuth.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from connector_auth.app.credentials import (
    AuthenticationResult,
    MicrosoftAppCredentials,
    MicrosoftAppCredentialsAuth,
)


class TestMicrosoftAppCredentialsAuth:
    """Test cases for MicrosoftAppCredentialsAuth."""

    @pytest.fixture
    def factory(self):
        """Factory for a mock acquirer returning a fixed token."""
        acquirer = MagicMock()
        acquirer.acquire_token = AsyncMock(return_value=AuthenticationResult(
            access_token="mock-access-token",
            expires_on=datetime(2026, 1, 15, 13, 0, tzinfo=timezone.utc)
        ))
        return MagicMock(return_value=acquirer)

    @pytest.fixture
    def credentials(self, registry, factory):
        """Create MicrosoftAppCredentials instance."""
        return MicrosoftAppCredentials("app-id", "app-password", trusted_hosts=registry, token_acquirer_factory=factory)

    @pytest.fixture
    def seen(self):
        """Requests received by the mock channel."""
        return []

    @pytest.fixture
    def transport(self, seen):
        """Mock channel transport."""
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "activity-1"})

        return httpx.MockTransport(handler)

    @pytest.mark.asyncio
    async def test_attaches_token_to_trusted_host(self, credentials, transport, seen):
        """Test trusted destinations receive the bearer token."""
        async with httpx.AsyncClient(transport=transport, auth=MicrosoftAppCredentialsAuth(credentials)) as client:
            response = await client.post("https://api.botframework.com/v3/conversations/abc/activities", json={})

        assert response.status_code == 200
        assert seen[0].headers["Authorization"] == "Bearer mock-access-token"

    @pytest.mark.asyncio
    async def test_skips_untrusted_host(self, credentials, transport, seen, factory):
        """Test untrusted destinations never see the token."""
        async with httpx.AsyncClient(transport=transport, auth=MicrosoftAppCredentialsAuth(credentials)) as client:
            await client.post("https://attacker.example.com/v3/conversations", json={})

        assert "Authorization" not in seen[0].headers
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_attaches_token_after_trusting_service_url(self, credentials, transport, seen):
        """Test a trusted service URL starts receiving tokens."""
        credentials.trust_service_url("https://smba.trafficmanager.net/amer/")

        async with httpx.AsyncClient(transport=transport, auth=MicrosoftAppCredentialsAuth(credentials)) as client:
            await client.post("https://smba.trafficmanager.net/amer/v3/conversations", json={})

        assert seen[0].headers["Authorization"] == "Bearer mock-access-token"

    @pytest.mark.asyncio
    async def test_anonymous_credentials_send_no_token(self, registry, transport, seen):
        """Test anonymous credentials never request a token."""
        credentials = MicrosoftAppCredentials.empty(registry)

        async with httpx.AsyncClient(transport=transport, auth=MicrosoftAppCredentialsAuth(credentials)) as client:
            await client.post("https://api.botframework.com/v3/conversations", json={})

        assert "Authorization" not in seen[0].headers

    def test_sync_client_rejected(self, credentials, transport):
        """Test the sync client is not supported."""
        with httpx.Client(transport=transport, auth=MicrosoftAppCredentialsAuth(credentials)) as client:
            with pytest.raises(RuntimeError):
                client.get("https://api.botframework.com/v3/conversations")
