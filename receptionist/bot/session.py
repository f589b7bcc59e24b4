"""
Realtime voice session facade.

A RealtimeVoiceSession is one call between a caller and the AI receptionist.
It wires the negotiator, interpreter, tool dispatcher and presenter together
and exposes the operations a UI needs:

    session = RealtimeVoiceSession("barber", on_transcript=print)
    if await session.start():
        await session.send_text("Do you have anything tomorrow morning?")
        session.toggle_mute()
        await session.interrupt()
        await session.end()

A session is single-use. Once it reaches ``error`` or ``disconnected`` a new
session must be created to call again.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from receptionist.bot.backend import BackendClient
from receptionist.bot.dispatcher import ToolDispatcher, ToolExecutor
from receptionist.bot.interpreter import EventStreamInterpreter
from receptionist.bot.media import AudioLevelMeter
from receptionist.bot.negotiator import SessionNegotiator, SessionResources
from receptionist.bot.presenter import TranscriptPresenter
from receptionist.bot.transport import RealtimeTransport
from receptionist.config.constants import LOGGER_NAME
from receptionist.exceptions import SignalingError, TransportClosed, VoiceSessionError
from receptionist.models.conversation import (
    ConversationStatus,
    ConversationView,
    Speaker,
    ToolInvocation,
    ToolResult,
    TranscriptEntry,
)
from receptionist.models.realtime_schemas import (
    BusinessSummary,
    function_call_output,
    response_cancel,
    response_create,
    user_text_message,
)

logger = logging.getLogger(LOGGER_NAME)


class RealtimeVoiceSession:
    """
    One call between a caller and a business's AI receptionist.

    The session owns everything the call acquires (credential, microphone,
    transport) and releases all of it when the call ends or fails. Status,
    transcript, error and audio level changes are pushed through the optional
    callbacks; ``view()`` returns the same state as a snapshot.

    Args:
        persona: Business persona key, e.g. ``"barber"``
        negotiator: Negotiator to use; defaults to WebRTC against the local backend
        executor: Tool executor; defaults to the backend's tool endpoint
    """

    def __init__(
        self,
        persona: str,
        negotiator: Optional[SessionNegotiator] = None,
        executor: Optional[ToolExecutor] = None,
        on_status: Optional[Callable[[ConversationStatus], None]] = None,
        on_transcript: Optional[Callable[[TranscriptEntry], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        on_audio_level: Optional[Callable[[float], None]] = None,
    ):
        self.session_id = f"sess_{uuid.uuid4().hex[:12]}"
        self.persona = persona
        self.created_at = datetime.now()
        self.business: Optional[BusinessSummary] = None

        backend = BackendClient()
        self.negotiator = negotiator or SessionNegotiator(backend=backend)
        self.on_status = on_status
        self.on_error = on_error

        self.presenter = TranscriptPresenter(on_transcript=on_transcript, on_audio_level=on_audio_level)
        self.interpreter = EventStreamInterpreter(
            self.presenter,
            on_tool_call=self._on_tool_call,
            on_status=self._on_status,
            on_error=self._on_error,
        )
        self.dispatcher = ToolDispatcher(
            executor or self.negotiator.backend.tool_executor(persona),
            respond=self._send_tool_result,
        )
        self.resources = SessionResources()

        self.muted = False
        self.error: Optional[VoiceSessionError] = None
        self.last_error: Optional[str] = None
        self._started = False
        self._ended = False
        self._negotiation: Optional[asyncio.Task] = None
        self._event_loop_task: Optional[asyncio.Task] = None
        self._teardown_task: Optional[asyncio.Task] = None

    @property
    def status(self) -> ConversationStatus:
        return self.interpreter.status

    @property
    def transport(self) -> Optional[RealtimeTransport]:
        return self.resources.transport

    def view(self) -> ConversationView:
        return self.presenter.snapshot(self.status, self.muted, self.last_error)

    async def start(self) -> bool:
        """
        Negotiate the session.

        Returns:
            bool: True once the provider acknowledged the session. False if
            negotiation failed (the error callback has been called and all
            resources are released) or the call was ended mid-negotiation.
        """
        if self._started:
            raise RuntimeError("A voice session can only be started once")
        self._started = True
        logger.info(f"Starting session {self.session_id} for persona: {self.persona}")
        self.interpreter.mark_connecting()

        meter = AudioLevelMeter(on_level=self.presenter.set_audio_level)
        self._negotiation = asyncio.create_task(
            self.negotiator.negotiate(
                self.persona,
                self.resources,
                meter,
                wait_for_ack=self.interpreter.wait_for_ack,
                on_transport=self._attach_transport,
                status_provider=lambda: self.status,
            )
        )
        try:
            grant = await self._negotiation
        except asyncio.CancelledError:
            if self._ended:
                logger.info(f"Session {self.session_id} ended during negotiation")
                return False
            raise
        except VoiceSessionError as e:
            logger.error(f"Session {self.session_id} failed: {e.message}")
            await self._fail(e)
            return False
        except Exception as e:
            logger.error(f"Session {self.session_id} failed unexpectedly: {e}", exc_info=True)
            await self._fail(SignalingError("Failed to connect to OpenAI", {"reason": str(e)}))
            return False
        finally:
            self._negotiation = None

        self.business = grant.business
        # Apply a mute requested while connecting
        self._apply_mute()
        logger.info(f"Session {self.session_id} connected")
        return True

    async def end(self):
        """Hang up. Safe to call from any state, including mid-negotiation."""
        if self._ended:
            return
        self._ended = True
        logger.info(f"Ending session {self.session_id}")

        if self._negotiation is not None and not self._negotiation.done():
            self._negotiation.cancel()
            try:
                await self._negotiation
            except (asyncio.CancelledError, VoiceSessionError):
                pass

        await self._ensure_teardown()
        self.interpreter.mark_disconnected()

    def set_muted(self, muted: bool) -> bool:
        self.muted = muted
        self._apply_mute()
        logger.info(f"Microphone {'muted' if muted else 'unmuted'}")
        return self.muted

    def toggle_mute(self) -> bool:
        """Flip the local audio track. Returns the new muted state."""
        return self.set_muted(not self.muted)

    async def send_text(self, text: str) -> bool:
        """Inject a typed user message and ask the agent to respond."""
        text = text.strip()
        if not text or not self._can_send():
            return False
        if not await self.transport.send(user_text_message(text)):
            return False
        self.presenter.add_final(Speaker.USER, text)
        return await self.transport.send(response_create())

    async def interrupt(self) -> bool:
        """Stop the agent's current response early."""
        if not self._can_send():
            return False
        logger.info("Interrupting agent response")
        return await self.transport.send(response_cancel())

    def _can_send(self) -> bool:
        return self.transport is not None and self.status.is_active and self.status != ConversationStatus.CONNECTING

    def _apply_mute(self):
        if self.resources.microphone is not None:
            self.resources.microphone.enabled = not self.muted

    def _attach_transport(self, transport: RealtimeTransport):
        self._event_loop_task = asyncio.create_task(self.interpreter.run(transport.events))

    def _on_tool_call(self, invocation: ToolInvocation):
        self.dispatcher.submit(invocation)

    async def _send_tool_result(self, result: ToolResult):
        if self.transport is None or self.status.is_terminal:
            logger.warning(f"Dropping result for {result.callId}: session is closed")
            return
        await self.transport.send(function_call_output(result.callId, result.payload))
        await self.transport.send(response_create())

    def _on_status(self, status: ConversationStatus):
        if status.is_terminal:
            self._schedule_teardown()
        if self.on_status:
            self.on_status(status)

    def _on_error(self, error: VoiceSessionError):
        if isinstance(error, TransportClosed) and self._ended:
            return
        self.error = error
        self.last_error = error.message
        if self.on_error:
            self.on_error(error.message)

    async def _fail(self, error: VoiceSessionError):
        self.interpreter.mark_error(error)
        await self._ensure_teardown()

    def _schedule_teardown(self) -> asyncio.Task:
        if self._teardown_task is None:
            self._teardown_task = asyncio.create_task(self._teardown())
        return self._teardown_task

    async def _ensure_teardown(self):
        await self._schedule_teardown()

    async def _teardown(self):
        await self.dispatcher.aclose()
        await self.resources.release()

        task = self._event_loop_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._event_loop_task = None
        logger.info(f"Session {self.session_id} torn down")
