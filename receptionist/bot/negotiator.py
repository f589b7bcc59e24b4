"""
Session negotiation with the realtime provider.

Acquires, in order: a fresh credential from the backend, the microphone, the
transport and its signaling exchange. The session configuration is sent as
the first message once the event channel opens, and negotiation completes
when the provider acknowledges the session.

Every acquired handle is recorded on a SessionResources object owned by the
caller, so a failure or an early hang-up can release exactly what was
acquired, in reverse order.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from receptionist.bot.backend import BackendClient
from receptionist.bot.media import AudioLevelMeter, MicrophoneStreamTrack
from receptionist.bot.transport import RealtimeTransport, WebRTCTransport
from receptionist.config.constants import LOGGER_NAME, NEGOTIATION_TIMEOUT
from receptionist.exceptions import SignalingError
from receptionist.models.conversation import ConversationStatus
from receptionist.models.realtime_schemas import CredentialGrant, session_update

logger = logging.getLogger(LOGGER_NAME)

StatusProvider = Callable[[], ConversationStatus]
MicrophoneFactory = Callable[[AudioLevelMeter, Optional[StatusProvider]], MicrophoneStreamTrack]
TransportFactory = Callable[[], RealtimeTransport]


class SessionResources:
    """Handles owned by one session, released in reverse acquisition order."""

    def __init__(self):
        self.level_meter: Optional[AudioLevelMeter] = None
        self.microphone: Optional[MicrophoneStreamTrack] = None
        self.transport: Optional[RealtimeTransport] = None
        self.released = False

    async def release(self):
        if self.released:
            return
        self.released = True

        # Event channel and peer connection
        if self.transport is not None:
            try:
                await self.transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")
            self.transport = None

        if self.microphone is not None:
            self.microphone.stop()
            self.microphone = None

        if self.level_meter is not None:
            self.level_meter.close()
            self.level_meter = None

        logger.info("Session resources released")


class SessionNegotiator:
    def __init__(
        self,
        backend: Optional[BackendClient] = None,
        microphone_factory: Optional[MicrophoneFactory] = None,
        transport_factory: Optional[TransportFactory] = None,
        timeout: float = NEGOTIATION_TIMEOUT,
    ):
        self.backend = backend or BackendClient()
        self.microphone_factory = microphone_factory or (
            lambda meter, status: MicrophoneStreamTrack(meter=meter, status_provider=status)
        )
        self.transport_factory = transport_factory or WebRTCTransport
        self.timeout = timeout

    async def negotiate(
        self,
        persona: str,
        resources: SessionResources,
        level_meter: AudioLevelMeter,
        wait_for_ack: Callable[[], Awaitable[bool]],
        on_transport: Optional[Callable[[RealtimeTransport], None]] = None,
        status_provider: Optional[StatusProvider] = None,
    ) -> CredentialGrant:
        """
        Negotiate a session for a persona.

        Raises:
            CredentialError: If the backend cannot issue a credential
            MediaAccessError: If the microphone cannot be opened
            SignalingError: If the handshake fails, times out or is never acknowledged
        """
        grant = await self.backend.fetch_credential(persona)
        logger.info(f"Credential issued for persona: {persona}")

        resources.level_meter = level_meter
        resources.microphone = self.microphone_factory(level_meter, status_provider)

        transport = self.transport_factory()
        resources.transport = transport
        if on_transport:
            on_transport(transport)

        async def send_configuration():
            if not await transport.send(session_update(grant.session_config)):
                logger.error("Could not send session configuration")

        transport.on_open = send_configuration

        try:
            await asyncio.wait_for(
                transport.connect(grant.client_secret.value, resources.microphone),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise SignalingError(f"Signaling timed out after {self.timeout:g}s") from e

        try:
            acknowledged = await asyncio.wait_for(wait_for_ack(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise SignalingError(
                f"Provider did not acknowledge the session within {self.timeout:g}s"
            ) from e
        if not acknowledged:
            raise SignalingError("Session ended before the provider acknowledged it")

        logger.info("Session negotiated")
        return grant
