"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for configuration values and making it easier to
maintain consistent naming throughout the codebase.
"""

import os

# Logger name used throughout the application
LOGGER_NAME = "receptionist"

# Default OpenAI model for Realtime API
DEFAULT_REALTIME_MODEL = os.getenv(
    "OPENAI_REALTIME_MODEL", "gpt-4o-realtime-preview-2024-12-17"
)

# Provider endpoints
OPENAI_REALTIME_SESSIONS_URL = "https://api.openai.com/v1/realtime/sessions"
OPENAI_REALTIME_URL = "https://api.openai.com/v1/realtime"
OPENAI_REALTIME_WS_URL = "wss://api.openai.com/v1/realtime"
TELEGRAM_API_URL = "https://api.telegram.org"

# Backend that brokers credentials and executes tools for a session
DEFAULT_BACKEND_URL = os.getenv("RECEPTIONIST_BACKEND_URL", "http://localhost:8000")
SESSION_ENDPOINT = "/api/realtime/session"
FUNCTION_ENDPOINT = "/api/realtime/function"

# Negotiation bound in seconds (credential fetch, signaling and provider ack)
NEGOTIATION_TIMEOUT = float(os.getenv("NEGOTIATION_TIMEOUT", "15"))
HTTP_TIMEOUT = 10.0

# Name of the structured event side-channel
DATA_CHANNEL_LABEL = "oai-events"

# Audio format constants
AUDIO_FORMAT_PCM16 = "pcm16"
WEBRTC_SAMPLE_RATE = 48000
WEBRTC_FRAME_SAMPLES = 960  # 20ms at 48kHz
REALTIME_SAMPLE_RATE = 24000  # PCM16 rate used by the WebSocket transport
AUDIO_CHANNELS = 1
AUDIO_LEVEL_SMOOTHING = 0.3

# Provider server event types
EVENT_SESSION_CREATED = "session.created"
EVENT_SESSION_UPDATED = "session.updated"
EVENT_SPEECH_STARTED = "input_audio_buffer.speech_started"
EVENT_SPEECH_STOPPED = "input_audio_buffer.speech_stopped"
EVENT_USER_TRANSCRIPT_DONE = "conversation.item.input_audio_transcription.completed"
EVENT_USER_TRANSCRIPT_DELTA = "conversation.item.input_audio_transcription.delta"
EVENT_AGENT_TRANSCRIPT_DELTA = "response.audio_transcript.delta"
EVENT_AGENT_TRANSCRIPT_DONE = "response.audio_transcript.done"
EVENT_AUDIO_STARTED = "response.audio.started"
EVENT_OUTPUT_AUDIO_STARTED = "output_audio_buffer.started"
EVENT_AUDIO_DELTA = "response.audio.delta"
EVENT_RESPONSE_CREATED = "response.created"
EVENT_RESPONSE_DONE = "response.done"
EVENT_FUNCTION_CALL_DONE = "response.function_call_arguments.done"
EVENT_ERROR = "error"
# Raised locally by a transport when its connection goes away
EVENT_TRANSPORT_CLOSED = "transport.closed"

# Client event types
CLIENT_SESSION_UPDATE = "session.update"
CLIENT_ITEM_CREATE = "conversation.item.create"
CLIENT_RESPONSE_CREATE = "response.create"
CLIENT_RESPONSE_CANCEL = "response.cancel"
CLIENT_AUDIO_APPEND = "input_audio_buffer.append"

# Tool names
TOOL_CHECK_AVAILABILITY = "check_availability"
TOOL_BOOK_APPOINTMENT = "book_appointment"
TOOL_CANCEL_APPOINTMENT = "cancel_appointment"
TOOL_GET_BUSINESS_INFO = "get_business_info"

# Scheduling
SLOT_STEP_MINUTES = 30
DEFAULT_SERVICE_DURATION = 30
SLOT_PREVIEW_COUNT = 5
ALTERNATIVES_PREVIEW_COUNT = 3
WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
