"""
Realtime transports to the speech provider.

A transport carries microphone audio up, agent audio down, and JSON events
both ways. Inbound events are placed on ``events`` in arrival order; when the
connection goes away without being asked to, a local ``transport.closed``
event is queued so the interpreter sees the disconnect in order.

Two transports are provided:

* WebRTCTransport: aiortc peer connection plus the ``oai-events`` data channel,
  signaled by posting the SDP offer with the short-lived credential.
* WebSocketTransport: a single WebSocket carrying base64 PCM16 audio and events.

Neither transport reconnects. The credential is single-use, so a dropped
connection ends the session.
"""

import asyncio
import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import aiohttp
import av
import websockets
from aiortc import MediaStreamTrack, RTCPeerConnection, RTCSessionDescription
from aiortc.mediastreams import MediaStreamError
from websockets.exceptions import ConnectionClosed, WebSocketException

from receptionist.config.constants import (
    AUDIO_CHANNELS,
    DATA_CHANNEL_LABEL,
    DEFAULT_REALTIME_MODEL,
    EVENT_AUDIO_DELTA,
    EVENT_TRANSPORT_CLOSED,
    HTTP_TIMEOUT,
    LOGGER_NAME,
    OPENAI_REALTIME_URL,
    OPENAI_REALTIME_WS_URL,
    REALTIME_SAMPLE_RATE,
)
from receptionist.exceptions import SignalingError
from receptionist.models.realtime_schemas import audio_append

logger = logging.getLogger(LOGGER_NAME)

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_PING_INTERVAL = 5

InboundEvent = Union[str, Dict[str, Any]]
OpenHandler = Callable[[], Awaitable[None]]


class RealtimeTransport(ABC):
    """Base class for provider transports."""

    def __init__(self, model: str = DEFAULT_REALTIME_MODEL, sink_factory: Optional[Callable[[], Any]] = None):
        self.model = model
        self.sink_factory = sink_factory
        self.sink = None
        self.events: "asyncio.Queue[InboundEvent]" = asyncio.Queue()
        self.on_open: Optional[OpenHandler] = None
        self._closing = False
        self._closed_signaled = False

    @property
    def closing(self) -> bool:
        return self._closing

    @abstractmethod
    async def connect(self, client_secret: str, microphone: MediaStreamTrack) -> None:
        """
        Open the connection using a single-use credential.

        Raises:
            SignalingError: If the handshake with the provider fails
        """

    @abstractmethod
    async def send(self, event: Dict[str, Any]) -> bool:
        """Send a client event. Returns False if the channel is not open."""

    @abstractmethod
    async def _close_connection(self) -> None:
        """Release the event channel, the connection and the audio sink."""

    async def close(self):
        """Close the transport. Safe to call more than once."""
        if self._closing:
            return
        self._closing = True
        await self._close_connection()
        if self.sink is not None:
            await self.sink.close()
            self.sink = None
        logger.info(f"{self.__class__.__name__} closed")

    async def _channel_opened(self):
        logger.info("Event channel open")
        if self.on_open:
            await self.on_open()

    def _signal_closed(self, reason: str):
        if self._closing or self._closed_signaled:
            return
        self._closed_signaled = True
        logger.warning(f"Transport closed unexpectedly: {reason}")
        self.events.put_nowait({"type": EVENT_TRANSPORT_CLOSED, "reason": reason})


class WebRTCTransport(RealtimeTransport):
    """Peer connection transport with the provider's event data channel."""

    def __init__(
        self,
        model: str = DEFAULT_REALTIME_MODEL,
        sink_factory: Optional[Callable[[], Any]] = None,
        peer_factory: Callable[[], RTCPeerConnection] = RTCPeerConnection,
        timeout: float = HTTP_TIMEOUT,
    ):
        super().__init__(model, sink_factory)
        self.peer_factory = peer_factory
        self.timeout = timeout
        self.pc: Optional[RTCPeerConnection] = None
        self.channel = None

    async def connect(self, client_secret: str, microphone: MediaStreamTrack) -> None:
        self.pc = self.peer_factory()

        @self.pc.on("track")
        def on_track(track):
            logger.info(f"Received remote {track.kind} track")
            if track.kind == "audio" and self.sink_factory:
                self.sink = self.sink_factory()
                self.sink.start(track)

        @self.pc.on("connectionstatechange")
        async def on_connectionstatechange():
            state = self.pc.connectionState
            logger.info(f"Connection state: {state}")
            if state in ("failed", "closed"):
                self._signal_closed(f"Peer connection {state}")

        self.pc.addTrack(microphone)

        self.channel = self.pc.createDataChannel(DATA_CHANNEL_LABEL)

        @self.channel.on("open")
        async def on_open():
            await self._channel_opened()

        @self.channel.on("message")
        def on_message(message):
            self.events.put_nowait(message)

        @self.channel.on("close")
        def on_close():
            self._signal_closed("Event channel closed")

        try:
            offer = await self.pc.createOffer()
            await self.pc.setLocalDescription(offer)
        except Exception as e:
            raise SignalingError("Failed to connect to OpenAI", {"reason": f"Could not create offer: {e}"}) from e

        answer_sdp = await self._exchange_sdp(client_secret, self.pc.localDescription.sdp)
        try:
            await self.pc.setRemoteDescription(RTCSessionDescription(sdp=answer_sdp, type="answer"))
        except Exception as e:
            # aiortc raises several error types for an unusable answer
            raise SignalingError("Failed to connect to OpenAI", {"reason": f"Invalid SDP answer: {e}"}) from e
        logger.info("Remote description applied")

    async def _exchange_sdp(self, client_secret: str, offer_sdp: str) -> str:
        url = f"{OPENAI_REALTIME_URL}?model={self.model}"
        headers = {
            "Authorization": f"Bearer {client_secret}",
            "Content-Type": "application/sdp",
        }
        logger.info(f"Sending SDP offer for model: {self.model}")
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(url, data=offer_sdp, headers=headers) as response:
                    if response.status not in (200, 201):
                        raise SignalingError(
                            "Failed to connect to OpenAI", {"status": response.status}
                        )
                    return await response.text()
        except (aiohttp.ClientError, TimeoutError) as e:
            raise SignalingError("Failed to connect to OpenAI", {"reason": str(e)}) from e

    async def send(self, event: Dict[str, Any]) -> bool:
        if self.channel is None or self.channel.readyState != "open":
            logger.warning(f"Cannot send {event.get('type')} - event channel not open")
            return False
        self.channel.send(json.dumps(event))
        return True

    async def _close_connection(self) -> None:
        if self.channel is not None:
            self.channel.close()
            self.channel = None
        if self.pc is not None:
            await self.pc.close()
            self.pc = None


class WebSocketTransport(RealtimeTransport):
    """
    Single WebSocket transport to the OpenAI Realtime API.

    Microphone frames are resampled to 24kHz mono PCM16 and sent as
    ``input_audio_buffer.append`` events; ``response.audio.delta`` payloads are
    played through the sink and also forwarded to the interpreter.
    """

    def __init__(
        self,
        model: str = DEFAULT_REALTIME_MODEL,
        sink_factory: Optional[Callable[[], Any]] = None,
        connect_timeout: float = HTTP_TIMEOUT,
    ):
        super().__init__(model, sink_factory)
        self.connect_timeout = connect_timeout
        self.ws = None
        self._recv_task: Optional[asyncio.Task] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._resampler = av.AudioResampler(format="s16", layout="mono", rate=REALTIME_SAMPLE_RATE)

    async def connect(self, client_secret: str, microphone: MediaStreamTrack) -> None:
        url = f"{OPENAI_REALTIME_WS_URL}?model={self.model}"
        headers = {
            "Authorization": f"Bearer {client_secret}",
            "OpenAI-Beta": "realtime=v1",
        }

        logger.info(f"Connecting to OpenAI Realtime API with model: {self.model}")
        logger.debug("Using headers: Authorization: Bearer [CREDENTIAL_HIDDEN], OpenAI-Beta: realtime=v1")
        try:
            self.ws = await asyncio.wait_for(
                websockets.connect(
                    url,
                    max_size=WS_MAX_SIZE,
                    ping_interval=WS_PING_INTERVAL,
                    ping_timeout=10,
                    compression=None,  # Disable compression for lower latency
                    additional_headers=headers,
                ),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            raise SignalingError(
                f"Timeout while connecting to OpenAI Realtime API (after {self.connect_timeout}s)"
            ) from e
        except (OSError, WebSocketException) as e:
            raise SignalingError("Failed to connect to OpenAI", {"reason": str(e)}) from e

        if self.sink_factory:
            self.sink = self.sink_factory()

        self._recv_task = asyncio.create_task(self._recv_loop())
        # The socket itself is the event channel, so it is open as soon as we connect
        await self._channel_opened()
        self._pump_task = asyncio.create_task(self._pump_microphone(microphone))
        logger.info("Successfully connected to OpenAI Realtime API")

    async def _recv_loop(self):
        try:
            async for message in self.ws:
                try:
                    event = json.loads(message)
                except json.JSONDecodeError:
                    logger.warning("Received non-JSON message from OpenAI")
                    continue

                if event.get("type") == EVENT_AUDIO_DELTA and self.sink is not None:
                    audio = event.get("delta")
                    if audio:
                        await self.sink.play(base64.b64decode(audio), REALTIME_SAMPLE_RATE, AUDIO_CHANNELS)

                self.events.put_nowait(event)
        except ConnectionClosed as e:
            logger.info(f"WebSocket connection closed: {e}")
        self._signal_closed("WebSocket closed")

    async def _pump_microphone(self, microphone: MediaStreamTrack):
        try:
            while not self._closing:
                frame = await microphone.recv()
                for resampled in self._resampler.resample(frame):
                    chunk = base64.b64encode(resampled.to_ndarray().tobytes()).decode("ascii")
                    await self.send(audio_append(chunk))
        except MediaStreamError:
            logger.info("Microphone track ended")

    async def send(self, event: Dict[str, Any]) -> bool:
        if self.ws is None or self._closing:
            logger.warning(f"Cannot send {event.get('type')} - connection not active")
            return False
        try:
            await asyncio.wait_for(self.ws.send(json.dumps(event)), timeout=5.0)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Timeout while sending {event.get('type')}")
            return False
        except ConnectionClosed as e:
            logger.warning(f"Connection closed while sending: {e}")
            self._signal_closed("WebSocket closed")
            return False

    async def _close_connection(self) -> None:
        for task in (self._pump_task, self._recv_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._pump_task = None
        self._recv_task = None
        if self.ws is not None:
            await self.ws.close()
            self.ws = None
