"""
Short-lived credential broker for realtime sessions.

The backend holds the long-lived OpenAI API key and exchanges it for an
ephemeral client secret scoped to a single session. The secret is returned
together with the session configuration the client must send once its event
channel opens.
"""

import logging
import os
from typing import Optional

import aiohttp
from pydantic import ValidationError

from receptionist.config.businesses import select_voice
from receptionist.config.constants import (
    DEFAULT_REALTIME_MODEL,
    HTTP_TIMEOUT,
    LOGGER_NAME,
    OPENAI_REALTIME_SESSIONS_URL,
)
from receptionist.exceptions import CredentialError
from receptionist.models.business import BusinessContext
from receptionist.models.realtime_schemas import (
    BusinessSummary,
    CredentialGrant,
    RealtimeSessionResponse,
    SessionConfig,
)
from receptionist.services.prompts import generate_system_prompt
from receptionist.services.tools import VOICE_AGENT_FUNCTIONS


def build_session_config(persona: str, business: BusinessContext) -> SessionConfig:
    """Assemble the session configuration for a persona."""
    return SessionConfig(
        instructions=generate_system_prompt(business),
        voice=select_voice(persona, business),
        tools=VOICE_AGENT_FUNCTIONS,
    )


class RealtimeSessionBroker:
    """Creates provider sessions and their ephemeral client secrets."""

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_REALTIME_MODEL):
        self.api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY")
        self.model = model
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def create_grant(self, persona: str, business: BusinessContext) -> CredentialGrant:
        """
        Request an ephemeral session from the provider.

        Raises:
            CredentialError: If the API key is missing or the provider refuses
        """
        if not self.configured:
            raise CredentialError("OpenAI API key not configured")

        config = build_session_config(persona, business)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {"model": self.model, "voice": config.voice}

        self.logger.info(f"Creating realtime session for persona {persona} with model {self.model}")
        self.logger.debug("Using headers: Authorization: Bearer [API_KEY_HIDDEN]")
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=HTTP_TIMEOUT)
            ) as session:
                async with session.post(
                    OPENAI_REALTIME_SESSIONS_URL, json=body, headers=headers
                ) as response:
                    if response.status != 200:
                        detail = await response.text()
                        self.logger.error(f"OpenAI session error ({response.status}): {detail[:200]}")
                        raise CredentialError("Failed to create session")
                    data = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            self.logger.error(f"Could not reach OpenAI session endpoint: {e}")
            raise CredentialError("Failed to create session") from e
        except ValueError as e:
            self.logger.error(f"OpenAI session endpoint returned a non-JSON body: {e}")
            raise CredentialError("Failed to create session") from e

        if not isinstance(data, dict):
            self.logger.error("OpenAI session response is not an object")
            raise CredentialError("Failed to create session")
        try:
            provider_session = RealtimeSessionResponse(**data)
        except ValidationError as e:
            self.logger.error(f"OpenAI session response is missing fields: {e.error_count()} error(s)")
            raise CredentialError("Failed to create session") from e
        return CredentialGrant(
            client_secret=provider_session.client_secret,
            session_config=config,
            business=BusinessSummary(
                id=business.id,
                name=business.name,
                agentName=business.agentPersona.name,
                greeting=business.agentPersona.greeting,
            ),
        )
