"""
Issues credentials for new voice sessions.

A voice session starts by asking the backend for a single-use client secret
and the session configuration it must send to the provider. The long-lived
OpenAI API key stays on the server.
"""

import logging

from fastapi.responses import JSONResponse

from receptionist.config.businesses import DEFAULT_PERSONA, get_business
from receptionist.config.constants import LOGGER_NAME
from receptionist.exceptions import CredentialError
from receptionist.models.api_schemas import ErrorResponse, SessionRequest
from receptionist.services.credentials import RealtimeSessionBroker

logger = logging.getLogger(LOGGER_NAME)


async def handle_session_request(
    request: SessionRequest, broker: RealtimeSessionBroker
) -> JSONResponse:
    """
    Handle a credential request for a persona.

    Args:
        request: The validated request body
        broker: Broker holding the OpenAI API key

    Returns:
        The credential grant, or an error body with status 400 (unknown
        persona) or 500 (missing key or provider failure)
    """
    persona = request.persona or DEFAULT_PERSONA
    business = get_business(persona)
    if business is None:
        logger.warning(f"Credential requested for unknown persona: {persona}")
        return JSONResponse(status_code=400, content=ErrorResponse(error="Unknown persona").model_dump())

    if not broker.configured:
        logger.error("OpenAI API key not configured")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="OpenAI API key not configured").model_dump(),
        )

    try:
        grant = await broker.create_grant(persona, business)
    except CredentialError as e:
        return JSONResponse(status_code=500, content=ErrorResponse(error=e.message).model_dump())

    logger.info(f"Issued session credential for {business.name}")
    return JSONResponse(content=grant.model_dump())
