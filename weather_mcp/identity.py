# -*- coding: utf-8 -*-
"""
Caller identity via the On-Behalf-Of flow.

Chain, one fresh pass per call (nothing is cached):
  1. managed identity token for the token-exchange audience
  2. OBO token for the profile API, minted from the caller's bearer token
     with the step-1 token as the client assertion
  3. profile API call with the step-2 token
  4. sensitive profile fields replaced with REDACTED

Each stage returns a Step; the first failure ends the chain and the caller
gets the consent link instead of the profile.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx
from azure.identity.aio import ManagedIdentityCredential, OnBehalfOfCredential

from .config import Settings
from .results import CurrentUserOutput, Envelope, Step, run_chain

logger = logging.getLogger("weather_mcp.identity")

REDACTED = "[MASKED]"
NO_AUTH_MESSAGE = "No authentication headers found"
SUCCESS_MESSAGE = "Successfully retrieved user information from Microsoft Graph"


def bearer_token(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """Token part of an `Authorization: Bearer <token>` header, if there is one."""
    if not headers:
        return None
    value = next((v for k, v in headers.items() if k.lower() == "authorization"), None)
    if not value:
        return None
    parts = value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def mask_profile(profile: Mapping[str, Any]) -> Dict[str, Any]:
    masked = dict(profile)
    if "id" in masked:
        masked["id"] = REDACTED
    phones = masked.get("businessPhones")
    if isinstance(phones, list):
        masked["businessPhones"] = [REDACTED for _ in phones]
    return masked


def consent_message(hostname: Optional[str]) -> str:
    login = f"https://{hostname}/.auth/login/aad?post_login_redirect_uri=https://{hostname}/authcomplete"
    return (
        "Error during token exchange and Graph API call. You're logged in but might need "
        f"to grant consent to the application. Open a browser to the following link to consent: {login}"
    )


class IdentityExchange:
    def __init__(
        self,
        settings: Settings,
        managed_identity_factory=ManagedIdentityCredential,
        obo_factory=OnBehalfOfCredential,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._managed_identity_factory = managed_identity_factory
        self._obo_factory = obo_factory
        self._http_transport = http_transport

    async def platform_token(self, _: Any = None) -> Step[str]:
        try:
            async with self._managed_identity_factory(client_id=self.settings.federated_client_id) as credential:
                token = await credential.get_token(self.settings.exchange_scope)
        except Exception as e:
            logger.error(f"Managed identity token request failed: {type(e).__name__}: {e}", exc_info=True)
            return Step.fail("platform credential")
        return Step.success(token.token)

    async def delegated_token(self, user_assertion: str, platform_token: str) -> Step[str]:
        try:
            async with self._obo_factory(
                self.settings.tenant_id,
                self.settings.client_id,
                client_assertion_func=lambda: platform_token,
                user_assertion=user_assertion,
            ) as credential:
                token = await credential.get_token(self.settings.graph_scope)
        except Exception as e:
            logger.error(f"On-Behalf-Of token request failed: {type(e).__name__}: {e}", exc_info=True)
            return Step.fail("delegated credential")
        return Step.success(token.token)

    async def profile(self, access_token: str) -> Step[Dict[str, Any]]:
        try:
            async with httpx.AsyncClient(transport=self._http_transport, timeout=30) as client:
                resp = await client.get(
                    self.settings.graph_me_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Profile request failed: {type(e).__name__}: {e}")
            return Step.fail("profile request")
        if not isinstance(data, dict):
            logger.error(f"Profile response is not an object: {type(data).__name__}")
            return Step.fail("profile request")
        return Step.success(data)

    async def run(self, user_assertion: str) -> Step[Dict[str, Any]]:
        async def delegate(platform_token: str) -> Step[str]:
            return await self.delegated_token(user_assertion, platform_token)

        async def redact(profile: Dict[str, Any]) -> Step[Dict[str, Any]]:
            return Step.success(mask_profile(profile))

        return await run_chain(None, self.platform_token, delegate, self.profile, redact)


async def handle_current_user(exchange: IdentityExchange, headers: Optional[Mapping[str, str]]) -> Envelope:
    token = bearer_token(headers)
    if token is None:
        return Envelope.from_model(CurrentUserOutput(authenticated=False, message=NO_AUTH_MESSAGE), failed=True)

    result = await exchange.run(token)
    if not result.ok:
        logger.warning(f"Identity chain stopped at: {result.error}")
        output = CurrentUserOutput(authenticated=False, message=consent_message(exchange.settings.website_hostname))
        return Envelope.from_model(output, failed=True)

    return Envelope.from_model(CurrentUserOutput(authenticated=True, user=result.value, message=SUCCESS_MESSAGE))
