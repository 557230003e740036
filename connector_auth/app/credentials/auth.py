"""
httpx integration that attaches the bot's token to trusted destinations.
"""

from typing import AsyncGenerator, Generator

import httpx

from shared.logging import get_logger
from .app_credentials import MicrosoftAppCredentials


class MicrosoftAppCredentialsAuth(httpx.Auth):
    """Adds ``Authorization: Bearer`` to requests bound for trusted hosts.

    Usage::

        client = httpx.AsyncClient(auth=MicrosoftAppCredentialsAuth(credentials))
    """

    def __init__(self, credentials: MicrosoftAppCredentials) -> None:
        self.credentials = credentials
        self.logger = get_logger("connector_auth.http")

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("MicrosoftAppCredentialsAuth requires httpx.AsyncClient")

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if self.credentials.is_anonymous:
            yield request
            return

        if self.credentials.should_attach_token(request.url):
            result = await self.credentials.get_token()
            request.headers["Authorization"] = f"Bearer {result.access_token}"
        else:
            self.logger.info("Not attaching token to untrusted host", host=request.url.host)

        yield request
