"""
Event stream interpreter.

Classifies provider events into a fixed set of event classes and drives the
ConversationStatus state machine. The interpreter is the only writer of the
session status: the session itself only asks for the local transitions
(connecting, error, disconnected) through the ``mark_*`` methods.

Events are handled one at a time in arrival order. Tool calls are handed off
through a callback that must not block, so later events keep flowing while a
tool runs.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple, Union

from pydantic import ValidationError

from receptionist.config.constants import (
    EVENT_AGENT_TRANSCRIPT_DELTA,
    EVENT_AGENT_TRANSCRIPT_DONE,
    EVENT_AUDIO_DELTA,
    EVENT_AUDIO_STARTED,
    EVENT_ERROR,
    EVENT_FUNCTION_CALL_DONE,
    EVENT_OUTPUT_AUDIO_STARTED,
    EVENT_RESPONSE_CREATED,
    EVENT_RESPONSE_DONE,
    EVENT_SESSION_CREATED,
    EVENT_SESSION_UPDATED,
    EVENT_SPEECH_STARTED,
    EVENT_SPEECH_STOPPED,
    EVENT_TRANSPORT_CLOSED,
    EVENT_USER_TRANSCRIPT_DELTA,
    EVENT_USER_TRANSCRIPT_DONE,
    LOGGER_NAME,
)
from receptionist.bot.presenter import TranscriptPresenter
from receptionist.exceptions import ProviderError, TransportClosed, VoiceSessionError
from receptionist.models.conversation import ConversationStatus, Speaker, ToolInvocation
from receptionist.models.realtime_schemas import RealtimeErrorDetail

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_LOST = "Connection to the assistant was lost"


class EventClass(str, Enum):
    SESSION_ACK = "session_ack"
    CONFIG_ACK = "config_ack"
    SPEECH_STARTED = "speech_started"
    SPEECH_STOPPED = "speech_stopped"
    USER_TRANSCRIPT_DELTA = "user_transcript_delta"
    USER_TRANSCRIPT_DONE = "user_transcript_done"
    AGENT_TRANSCRIPT_DELTA = "agent_transcript_delta"
    AGENT_TRANSCRIPT_DONE = "agent_transcript_done"
    AUDIO_STARTED = "audio_started"
    AUDIO_DELTA = "audio_delta"
    RESPONSE_CREATED = "response_created"
    RESPONSE_DONE = "response_done"
    TOOL_CALL = "tool_call"
    PROVIDER_ERROR = "provider_error"
    TRANSPORT_CLOSED = "transport_closed"
    IGNORED = "ignored"


EVENT_CLASSES: Dict[str, EventClass] = {
    EVENT_SESSION_CREATED: EventClass.SESSION_ACK,
    EVENT_SESSION_UPDATED: EventClass.CONFIG_ACK,
    EVENT_SPEECH_STARTED: EventClass.SPEECH_STARTED,
    EVENT_SPEECH_STOPPED: EventClass.SPEECH_STOPPED,
    EVENT_USER_TRANSCRIPT_DELTA: EventClass.USER_TRANSCRIPT_DELTA,
    EVENT_USER_TRANSCRIPT_DONE: EventClass.USER_TRANSCRIPT_DONE,
    EVENT_AGENT_TRANSCRIPT_DELTA: EventClass.AGENT_TRANSCRIPT_DELTA,
    EVENT_AGENT_TRANSCRIPT_DONE: EventClass.AGENT_TRANSCRIPT_DONE,
    EVENT_AUDIO_STARTED: EventClass.AUDIO_STARTED,
    EVENT_OUTPUT_AUDIO_STARTED: EventClass.AUDIO_STARTED,
    EVENT_AUDIO_DELTA: EventClass.AUDIO_DELTA,
    EVENT_RESPONSE_CREATED: EventClass.RESPONSE_CREATED,
    EVENT_RESPONSE_DONE: EventClass.RESPONSE_DONE,
    EVENT_FUNCTION_CALL_DONE: EventClass.TOOL_CALL,
    EVENT_ERROR: EventClass.PROVIDER_ERROR,
    EVENT_TRANSPORT_CLOSED: EventClass.TRANSPORT_CLOSED,
}

_S = ConversationStatus
_LIVE = frozenset({_S.CONNECTED, _S.LISTENING, _S.PROCESSING, _S.SPEAKING})
_NOT_TERMINAL = _LIVE | {_S.IDLE, _S.CONNECTING}

# event class -> (states it applies from, resulting state)
TRANSITIONS: Dict[EventClass, Tuple[FrozenSet[ConversationStatus], ConversationStatus]] = {
    EventClass.SESSION_ACK: (frozenset({_S.CONNECTING}), _S.CONNECTED),
    EventClass.CONFIG_ACK: (frozenset({_S.CONNECTED}), _S.LISTENING),
    EventClass.SPEECH_STARTED: (_LIVE, _S.LISTENING),
    EventClass.SPEECH_STOPPED: (frozenset({_S.LISTENING}), _S.PROCESSING),
    EventClass.AUDIO_STARTED: (_LIVE, _S.SPEAKING),
    EventClass.AUDIO_DELTA: (_LIVE, _S.SPEAKING),
    EventClass.RESPONSE_DONE: (frozenset({_S.SPEAKING, _S.PROCESSING}), _S.LISTENING),
    EventClass.PROVIDER_ERROR: (_NOT_TERMINAL, _S.ERROR),
    EventClass.TRANSPORT_CLOSED: (_NOT_TERMINAL, _S.DISCONNECTED),
}


def classify(event: Dict[str, Any]) -> EventClass:
    return EVENT_CLASSES.get(event.get("type", ""), EventClass.IGNORED)


def next_status(current: ConversationStatus, event_class: EventClass) -> ConversationStatus:
    """Pure transition function; returns ``current`` when the event does not apply."""
    rule = TRANSITIONS.get(event_class)
    if rule is None:
        return current
    sources, target = rule
    return target if current in sources else current


def provider_error(event: Dict[str, Any]) -> ProviderError:
    """Build the error for a provider ``error`` event, keeping its type and code."""
    error = event.get("error")
    if not isinstance(error, dict):
        return ProviderError("Unknown provider error")
    try:
        detail = RealtimeErrorDetail(**error)
    except ValidationError:
        return ProviderError("Unknown provider error")
    return ProviderError(detail.message, {"type": detail.type, "code": detail.code})


class EventStreamInterpreter:
    def __init__(
        self,
        presenter: TranscriptPresenter,
        on_tool_call: Optional[Callable[[ToolInvocation], None]] = None,
        on_status: Optional[Callable[[ConversationStatus], None]] = None,
        on_error: Optional[Callable[[VoiceSessionError], None]] = None,
    ):
        self.presenter = presenter
        self.on_tool_call = on_tool_call
        self.on_status = on_status
        self.on_error = on_error
        self._status = ConversationStatus.IDLE
        self._settled = asyncio.Event()
        # Audio deltas only count as speech while a response is in flight
        self._responding = False

    @property
    def status(self) -> ConversationStatus:
        return self._status

    def _set_status(self, status: ConversationStatus):
        if status == self._status:
            return
        logger.info(f"Status: {self._status.value} -> {status.value}")
        self._status = status
        if status == ConversationStatus.CONNECTED or status.is_terminal:
            self._settled.set()
        if self.on_status:
            self.on_status(status)

    def mark_connecting(self):
        if self._status != ConversationStatus.IDLE:
            raise RuntimeError(f"Cannot start negotiating from {self._status.value}")
        self._set_status(ConversationStatus.CONNECTING)

    def mark_error(self, error: VoiceSessionError) -> bool:
        """Move to error and report it. No-op once terminal."""
        if self._status.is_terminal:
            return False
        self._set_status(ConversationStatus.ERROR)
        if self.on_error:
            self.on_error(error)
        return True

    def mark_disconnected(self) -> bool:
        if self._status.is_terminal:
            return False
        self._set_status(ConversationStatus.DISCONNECTED)
        return True

    async def wait_for_ack(self) -> bool:
        """Wait until the provider acknowledges the session, or the session ends first."""
        await self._settled.wait()
        return not self._status.is_terminal

    async def run(self, events: "asyncio.Queue[Union[str, Dict[str, Any]]]"):
        """Drain the transport's event queue until the session reaches a terminal state."""
        while not self._status.is_terminal:
            raw = await events.get()
            self.handle(raw)

    def handle(self, raw: Union[str, Dict[str, Any]]) -> EventClass:
        if self._status.is_terminal:
            return EventClass.IGNORED

        if isinstance(raw, (str, bytes)):
            try:
                event = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Ignoring non-JSON event from provider")
                return EventClass.IGNORED
        else:
            event = raw
        if not isinstance(event, dict):
            return EventClass.IGNORED

        event_class = classify(event)
        if event_class == EventClass.IGNORED:
            logger.debug(f"Ignoring event: {event.get('type')}")
            return event_class

        if event_class == EventClass.USER_TRANSCRIPT_DELTA:
            self.presenter.append_partial(Speaker.USER, event.get("delta", ""))
        elif event_class == EventClass.USER_TRANSCRIPT_DONE:
            self.presenter.finalize(Speaker.USER, event.get("transcript"))
        elif event_class == EventClass.AGENT_TRANSCRIPT_DELTA:
            self.presenter.append_partial(Speaker.AGENT, event.get("delta", ""))
        elif event_class == EventClass.AGENT_TRANSCRIPT_DONE:
            self.presenter.finalize(Speaker.AGENT, event.get("transcript"))
        elif event_class == EventClass.TOOL_CALL:
            self._hand_off(event)
        elif event_class in (EventClass.RESPONSE_CREATED, EventClass.AUDIO_STARTED):
            self._responding = True
        elif event_class == EventClass.RESPONSE_DONE:
            self._responding = False
        elif event_class == EventClass.AUDIO_DELTA and not self._responding:
            logger.debug("Ignoring audio delta outside a response")
            return event_class
        elif event_class == EventClass.PROVIDER_ERROR:
            error = provider_error(event)
            logger.error(f"Provider error: {error.message}")
            self.mark_error(error)
            return event_class
        elif event_class == EventClass.TRANSPORT_CLOSED:
            reason = event.get("reason", "unknown reason")
            logger.warning(f"Transport closed: {reason}")
            self._set_status(ConversationStatus.DISCONNECTED)
            if self.on_error:
                self.on_error(TransportClosed(CONNECTION_LOST, {"reason": reason}))
            return event_class

        self._set_status(next_status(self._status, event_class))
        return event_class

    def _hand_off(self, event: Dict[str, Any]):
        call_id = event.get("call_id")
        name = event.get("name")
        if not call_id or not name:
            logger.warning("Ignoring tool call without call_id or name")
            return
        invocation = ToolInvocation(
            callId=call_id, name=name, argumentsJson=event.get("arguments") or "{}"
        )
        logger.info(f"Tool call requested: {name} ({call_id})")
        if self.on_tool_call:
            self.on_tool_call(invocation)
