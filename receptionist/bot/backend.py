"""
HTTP client for the receptionist backend.

A voice session talks to the backend twice: once to obtain a fresh credential
grant before negotiating with the provider, and once per tool call to run the
requested business action.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

import aiohttp
from pydantic import ValidationError

from receptionist.config.constants import (
    DEFAULT_BACKEND_URL,
    FUNCTION_ENDPOINT,
    HTTP_TIMEOUT,
    LOGGER_NAME,
    SESSION_ENDPOINT,
)
from receptionist.exceptions import CredentialError, ToolExecutionError
from receptionist.models.realtime_schemas import CredentialGrant

logger = logging.getLogger(LOGGER_NAME)

ToolExecutor = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]


class BackendClient:
    """Client for the credential and tool execution endpoints."""

    def __init__(self, base_url: str = DEFAULT_BACKEND_URL, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch_credential(self, persona: str) -> CredentialGrant:
        """
        Request a single-use credential grant for a persona.

        Raises:
            CredentialError: On network failure, non-success status or a malformed body
        """
        url = f"{self.base_url}{SESSION_ENDPOINT}"
        logger.info(f"Requesting session credential for persona: {persona}")
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(url, json={"persona": persona}) as response:
                    if response.status != 200:
                        logger.error(f"Credential endpoint returned {response.status}")
                        raise CredentialError("Failed to get session token")
                    try:
                        data = await response.json()
                    except ValueError as e:
                        logger.error(f"Credential endpoint returned a non-JSON body: {e}")
                        raise CredentialError("Malformed session token response") from e
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Could not reach credential endpoint: {e}")
            raise CredentialError("Failed to get session token") from e

        if not isinstance(data, dict):
            raise CredentialError("Malformed session token response")
        try:
            return CredentialGrant(**data)
        except ValidationError as e:
            raise CredentialError("Malformed session token response") from e

    async def execute_tool(
        self, persona: str, function_name: str, function_args: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Run a tool on the backend and return its result payload.

        Raises:
            ToolExecutionError: On network failure or a non-success status
        """
        url = f"{self.base_url}{FUNCTION_ENDPOINT}"
        body = {"persona": persona, "functionName": function_name, "functionArgs": function_args}
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(url, json=body) as response:
                    if response.status != 200:
                        raise ToolExecutionError(
                            f"Tool endpoint returned {response.status} for {function_name}"
                        )
                    data = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            raise ToolExecutionError(f"Could not reach tool endpoint: {e}") from e

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            raise ToolExecutionError(f"Tool endpoint returned no result for {function_name}")
        return result

    def tool_executor(self, persona: str) -> ToolExecutor:
        """Bind tool execution to one persona."""
        async def execute(function_name: str, function_args: Dict[str, Any]) -> Dict[str, Any]:
            return await self.execute_tool(persona, function_name, function_args)
        return execute
