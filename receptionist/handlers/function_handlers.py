"""
Executes tool calls on behalf of voice sessions.

The model's tool calls are forwarded here by the session's tool dispatcher.
Argument problems are answered with an ``error`` result rather than an HTTP
failure, so the model can recover and ask the caller again.
"""

import logging
from typing import Any, Dict

from fastapi.responses import JSONResponse

from receptionist.config.businesses import DEFAULT_PERSONA, get_business
from receptionist.config.constants import LOGGER_NAME, TOOL_CHECK_AVAILABILITY
from receptionist.exceptions import ToolExecutionError
from receptionist.models.api_schemas import ErrorResponse, FunctionRequest, FunctionResponse
from receptionist.services.booking import BookingService

logger = logging.getLogger(LOGGER_NAME)


def _business_not_found(function_name: str) -> Dict[str, Any]:
    if function_name == TOOL_CHECK_AVAILABILITY:
        return {"slots": [], "message": "Business not found"}
    return {"error": "Business not found"}


async def handle_function_call(request: FunctionRequest, booking: BookingService) -> JSONResponse:
    persona = request.persona or DEFAULT_PERSONA
    logger.info(f"Function call {request.functionName} for persona {persona}")

    try:
        business = get_business(persona)
        if business is None:
            logger.warning(f"Function call for unknown persona: {persona}")
            result = _business_not_found(request.functionName)
        else:
            try:
                result = await booking.execute(business, request.functionName, request.functionArgs)
            except ToolExecutionError as e:
                logger.warning(f"{request.functionName} failed: {e.message}")
                result = {"error": e.message}
    except Exception as e:
        logger.error(f"Function execution error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse(error="Internal server error").model_dump())

    return JSONResponse(content=FunctionResponse(result=result).model_dump())
