"""
FastAPI server for the AI receptionist backend.

This module initializes and configures the FastAPI application that voice
sessions talk to. It issues single-use OpenAI Realtime credentials and
executes the agent's tool calls against the appointment book.

The server keeps the OpenAI API key and the Telegram bot token to itself;
clients only ever see the short-lived session secret.
"""

import os
from pathlib import Path

import dotenv
from fastapi import FastAPI

from receptionist.config.businesses import DEMO_BUSINESSES
from receptionist.config.constants import FUNCTION_ENDPOINT, SESSION_ENDPOINT
from receptionist.config.logging_config import configure_logging
from receptionist.handlers import function_handlers, session_handlers
from receptionist.models.api_schemas import FunctionRequest, SessionRequest
from receptionist.services.booking import BookingService
from receptionist.services.credentials import RealtimeSessionBroker
from receptionist.services.notifications import TelegramNotifier
from receptionist.services.repository import InMemoryAppointmentRepository

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

# Configure logging
logger = configure_logging()

# Get configuration from environment variables
PORT = int(os.getenv("PORT", "8000"))
HOST = os.getenv("HOST", "0.0.0.0")

# Create FastAPI application
app = FastAPI(
    title="Voice Receptionist",
    description="Realtime AI receptionists for small businesses, powered by the OpenAI Realtime API",
    version="1.0.0",
)

broker = RealtimeSessionBroker()
repository = InMemoryAppointmentRepository()
booking_service = BookingService(repository, TelegramNotifier())


@app.post(SESSION_ENDPOINT)
async def create_session(request: SessionRequest):
    """Issue a single-use credential and session configuration for a persona.

    Unknown personas are rejected with 400; a missing API key or a provider
    failure returns 500.
    """
    return await session_handlers.handle_session_request(request, broker)


@app.post(FUNCTION_ENDPOINT)
async def execute_function(request: FunctionRequest):
    """Execute one tool call from a voice session.

    Returns:
        dict: ``{"result": ...}`` shaped per tool.
    """
    return await function_handlers.handle_function_call(request, booking_service)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information indicating the server is operational.
    """
    return {
        "status": "healthy",
        "openai_api_key_configured": broker.configured,
        "telegram_configured": booking_service.notifier.configured,
        "personas": sorted(DEMO_BUSINESSES),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Voice Receptionist",
        "description": "Realtime AI receptionists for small businesses",
        "version": "1.0.0",
        "endpoints": {
            SESSION_ENDPOINT: "Issue a realtime session credential for a persona",
            FUNCTION_ENDPOINT: "Execute an agent tool call",
            "/health": "Health check endpoint",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
