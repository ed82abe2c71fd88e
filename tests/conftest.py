"""Shared fixtures: settings, a fake NWS upstream and fake azure credentials."""

from typing import Any, Dict, List, Tuple

import httpx
import pytest
from azure.core.credentials import AccessToken

from weather_mcp.config import Settings

NWS = "https://api.weather.gov"


@pytest.fixture
def settings():
    return Settings(
        federated_client_id="mi-client-id",
        client_id="app-client-id",
        tenant_id="tenant-id",
        website_hostname="weather.example.net",
    )


class FakeUpstream:
    """httpx MockTransport handler serving canned JSON by exact URL."""

    def __init__(self, routes: Dict[str, Tuple[int, Any]] = None):
        self.routes = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(str(request.url), (404, {"title": "Not Found"}))
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def upstream():
    return FakeUpstream()


class CredentialLog:
    """Builds fake ManagedIdentityCredential / OnBehalfOfCredential classes that record every call."""

    def __init__(self, platform_token="platform-token", delegated_token="delegated-token",
                 platform_error=None, delegated_error=None):
        self.calls: List[Tuple[str, Any]] = []
        log = self

        class FakeManagedIdentity:
            def __init__(self, client_id=None):
                log.calls.append(("managed_identity", {"client_id": client_id}))

            async def __aenter__(self):
                return self

            async def __aexit__(self, *exc):
                return False

            async def get_token(self, *scopes):
                log.calls.append(("managed_identity.get_token", scopes))
                if platform_error:
                    raise platform_error
                return AccessToken(platform_token, 0)

        class FakeOnBehalfOf:
            def __init__(self, tenant_id, client_id, client_assertion_func=None, user_assertion=None):
                log.calls.append(("obo", {
                    "tenant_id": tenant_id,
                    "client_id": client_id,
                    "user_assertion": user_assertion,
                }))
                self._assertion = client_assertion_func

            async def __aenter__(self):
                return self

            async def __aexit__(self, *exc):
                return False

            async def get_token(self, *scopes):
                log.calls.append(("obo.get_token", {"scopes": scopes, "client_assertion": self._assertion()}))
                if delegated_error:
                    raise delegated_error
                return AccessToken(delegated_token, 0)

        self.managed_identity = FakeManagedIdentity
        self.on_behalf_of = FakeOnBehalfOf

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.calls]
