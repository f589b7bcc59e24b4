"""
Terminal client for talking to a receptionist.

Starts a voice session against a running backend and maps typed commands to
the session's operations:

    /mute        toggle the microphone
    /interrupt   stop the agent mid-sentence
    /end         hang up
    anything else is sent to the agent as a typed message

Usage:
    python -m receptionist.cli --persona barber [--transport websocket]
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

import dotenv

from receptionist.bot.backend import BackendClient
from receptionist.bot.media import SpeakerSink
from receptionist.bot.negotiator import SessionNegotiator
from receptionist.bot.session import RealtimeVoiceSession
from receptionist.bot.transport import WebRTCTransport, WebSocketTransport
from receptionist.config.businesses import DEFAULT_PERSONA, DEMO_BUSINESSES
from receptionist.config.constants import DEFAULT_BACKEND_URL, DEFAULT_REALTIME_MODEL, NEGOTIATION_TIMEOUT
from receptionist.config.logging_config import configure_logging
from receptionist.models.conversation import ConversationStatus, TranscriptEntry

END_COMMANDS = ("/end", "/quit", "/exit")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Talk to an AI receptionist from the terminal")
    parser.add_argument(
        "--persona",
        default=DEFAULT_PERSONA,
        choices=sorted(DEMO_BUSINESSES),
        help=f"Business persona to call (default: {DEFAULT_PERSONA})",
    )
    parser.add_argument(
        "--backend",
        default=os.getenv("RECEPTIONIST_BACKEND_URL", DEFAULT_BACKEND_URL),
        help="Backend base URL (default: RECEPTIONIST_BACKEND_URL env var or http://localhost:8000)",
    )
    parser.add_argument(
        "--transport",
        default="webrtc",
        choices=["webrtc", "websocket"],
        help="Provider transport (default: webrtc)",
    )
    parser.add_argument(
        "--model",
        default=os.getenv("OPENAI_REALTIME_MODEL", DEFAULT_REALTIME_MODEL),
        help="Realtime model used for signaling",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=float(os.getenv("NEGOTIATION_TIMEOUT", NEGOTIATION_TIMEOUT)),
        help="Negotiation timeout in seconds (default: 15 or NEGOTIATION_TIMEOUT env var)",
    )
    parser.add_argument(
        "--no-speaker",
        action="store_true",
        help="Do not play the agent's audio (transcripts only)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "WARNING"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING or LOG_LEVEL env var)",
    )
    return parser.parse_args(argv)


def build_session(args) -> RealtimeVoiceSession:
    sink_factory = None if args.no_speaker else SpeakerSink
    transport_cls = WebSocketTransport if args.transport == "websocket" else WebRTCTransport

    negotiator = SessionNegotiator(
        backend=BackendClient(args.backend),
        transport_factory=lambda: transport_cls(model=args.model, sink_factory=sink_factory),
        timeout=args.timeout,
    )

    def show_status(status: ConversationStatus):
        print(f"[{status.value}]")

    def show_transcript(entry: TranscriptEntry):
        if entry.isFinal:
            print(f"{entry.speaker.value}: {entry.text}")

    def show_error(message: str):
        print(f"Error: {message}", file=sys.stderr)

    return RealtimeVoiceSession(
        args.persona,
        negotiator=negotiator,
        on_status=show_status,
        on_transcript=show_transcript,
        on_error=show_error,
    )


async def run_session(session: RealtimeVoiceSession) -> int:
    if not await session.start():
        return 1

    if session.business:
        print(f"Connected to {session.business.name}. {session.business.agentName} is listening.")
    print("Commands: /mute, /interrupt, /end. Anything else is sent as text.")

    try:
        while not session.status.is_terminal:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            command = line.strip()
            if not command:
                continue
            if command in END_COMMANDS:
                break
            if command == "/mute":
                muted = session.toggle_mute()
                print("Microphone muted" if muted else "Microphone live")
            elif command == "/interrupt":
                await session.interrupt()
            elif not await session.send_text(command):
                print("Message not sent: the session is not ready")
    finally:
        await session.end()

    return 0 if session.last_error is None else 1


def main(argv=None):
    """Entry point for the terminal client."""
    env_path = Path(".") / ".env"
    if env_path.exists():
        dotenv.load_dotenv(env_path)

    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        exit_code = asyncio.run(run_session(build_session(args)))
    except KeyboardInterrupt:
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
