"""
Voice session components for talking to the OpenAI Realtime API.

A call is represented by a RealtimeVoiceSession, which owns everything needed
for one conversation and releases it all when the call ends or fails.

Key components:
- SessionNegotiator: Fetches a single-use credential, opens the microphone,
  performs the signaling exchange and waits for the provider to acknowledge
  the session configuration.
- EventStreamInterpreter: Classifies provider events and drives the
  ConversationStatus state machine.
- ToolDispatcher: Runs the agent's tool calls on the backend and answers every
  call exactly once.
- TranscriptPresenter: Ordered transcript and audio level for display.
- WebRTCTransport / WebSocketTransport: Provider connections.

Usage examples:
```python
from receptionist.bot import RealtimeVoiceSession

async def call_the_salon():
    session = RealtimeVoiceSession(
        "barber",
        on_status=lambda status: print(f"[{status.value}]"),
        on_transcript=lambda entry: print(f"{entry.speaker.value}: {entry.text}"),
        on_error=lambda message: print(f"Error: {message}"),
    )
    if not await session.start():
        return

    await session.send_text("Can I get a haircut tomorrow at 10?")
    session.toggle_mute()
    await session.end()
```
"""

from receptionist.bot.backend import BackendClient
from receptionist.bot.dispatcher import ToolDispatcher
from receptionist.bot.interpreter import EventStreamInterpreter
from receptionist.bot.negotiator import SessionNegotiator, SessionResources
from receptionist.bot.presenter import TranscriptPresenter
from receptionist.bot.session import RealtimeVoiceSession
from receptionist.bot.transport import RealtimeTransport, WebRTCTransport, WebSocketTransport

__all__ = [
    "BackendClient",
    "ToolDispatcher",
    "EventStreamInterpreter",
    "SessionNegotiator",
    "SessionResources",
    "TranscriptPresenter",
    "RealtimeVoiceSession",
    "RealtimeTransport",
    "WebRTCTransport",
    "WebSocketTransport",
]
