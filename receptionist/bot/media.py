"""
Local audio media for a voice session.

Covers microphone capture as an aiortc track, the audio level meter that
drives the speaking indicator, playback of agent audio, and the policy that
decides when a dropped microphone stream may be reopened.
"""

import asyncio
import fractions
import logging
from typing import Callable, Optional

import av
import numpy as np
from aiortc import MediaStreamTrack
from aiortc.mediastreams import MediaStreamError

from receptionist.config.constants import (
    AUDIO_CHANNELS,
    AUDIO_LEVEL_SMOOTHING,
    LOGGER_NAME,
    REALTIME_SAMPLE_RATE,
    WEBRTC_FRAME_SAMPLES,
    WEBRTC_SAMPLE_RATE,
)
from receptionist.exceptions import MediaAccessError
from receptionist.models.conversation import ConversationStatus

logger = logging.getLogger(LOGGER_NAME)

# Speech rarely exceeds a third of full scale, so boost it for display
LEVEL_GAIN = 3.0
INT16_FULL_SCALE = 32768.0

_PYAUDIO_HINT = "PyAudio is required for local audio. Install it with: pip install 'voice-receptionist[audio]'"


def _load_pyaudio():
    try:
        import pyaudio
    except ImportError as e:
        raise MediaAccessError(_PYAUDIO_HINT) from e
    return pyaudio


class ListeningPolicy:
    """
    Decides whether a dropped microphone stream should be reopened.

    The microphone restarts by itself unless the session was stopped on
    purpose, or the agent is busy processing or speaking.
    """

    PAUSED_STATES = frozenset({ConversationStatus.PROCESSING, ConversationStatus.SPEAKING})

    def should_restart(self, status: ConversationStatus, stopped: bool) -> bool:
        if stopped or status.is_terminal:
            return False
        return status not in self.PAUSED_STATES


class AudioLevelMeter:
    """Smoothed RMS level of the local microphone, normalized to [0, 1]."""

    def __init__(
        self,
        smoothing: float = AUDIO_LEVEL_SMOOTHING,
        on_level: Optional[Callable[[float], None]] = None,
    ):
        self.smoothing = smoothing
        self.on_level = on_level
        self.level = 0.0
        self.closed = False

    def measure(self, samples: np.ndarray) -> float:
        if self.closed:
            return 0.0

        if samples.size == 0:
            raw = 0.0
        else:
            rms = float(np.sqrt(np.mean(np.square(samples.astype(np.float64)))))
            raw = min(1.0, rms / INT16_FULL_SCALE * LEVEL_GAIN)

        self.level = min(1.0, max(0.0, self.level + self.smoothing * (raw - self.level)))
        if self.on_level:
            self.on_level(self.level)
        return self.level

    def close(self):
        """Stop reporting levels and drop back to silence."""
        self.closed = True
        self.level = 0.0
        if self.on_level:
            self.on_level(0.0)
        self.on_level = None


class MicrophoneStreamTrack(MediaStreamTrack):
    """MediaStreamTrack that captures audio from the local microphone."""

    kind = "audio"

    def __init__(
        self,
        meter: Optional[AudioLevelMeter] = None,
        status_provider: Optional[Callable[[], ConversationStatus]] = None,
        policy: Optional[ListeningPolicy] = None,
        sample_rate: int = WEBRTC_SAMPLE_RATE,
        frame_samples: int = WEBRTC_FRAME_SAMPLES,
    ):
        super().__init__()
        self.meter = meter
        self.status_provider = status_provider or (lambda: ConversationStatus.LISTENING)
        self.policy = policy or ListeningPolicy()
        self.sample_rate = sample_rate
        self.frame_samples = frame_samples
        # Muting keeps the track live and sends silence
        self.enabled = True
        self.stopped = False
        self.timestamp = 0
        self._pa = None
        self._stream = None
        self._open_stream()
        logger.info(f"Microphone initialized: {sample_rate}Hz, {AUDIO_CHANNELS} channel(s)")

    def _open_stream(self):
        pyaudio = _load_pyaudio()
        try:
            self._pa = pyaudio.PyAudio()
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=AUDIO_CHANNELS,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.frame_samples,
            )
        except OSError as e:
            self._release_stream()
            raise MediaAccessError("Microphone is unavailable", {"reason": str(e)}) from e

    def _release_stream(self):
        if self._stream is not None:
            try:
                self._stream.stop_stream()
                self._stream.close()
            except OSError as e:
                logger.warning(f"Error closing microphone stream: {e}")
            self._stream = None
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None

    async def _read(self) -> bytes:
        silence = bytes(self.frame_samples * 2)

        if self._stream is None:
            if not self.policy.should_restart(self.status_provider(), self.stopped):
                await asyncio.sleep(self.frame_samples / self.sample_rate)
                return silence
            try:
                self._open_stream()
                logger.info("Microphone stream restarted")
            except MediaAccessError as e:
                logger.warning(f"Microphone restart failed: {e.message}")
                await asyncio.sleep(self.frame_samples / self.sample_rate)
                return silence

        try:
            return await asyncio.to_thread(
                self._stream.read, self.frame_samples, exception_on_overflow=False
            )
        except OSError as e:
            logger.warning(f"Microphone read failed: {e}")
            self._release_stream()
            return silence

    async def recv(self):
        """Get the next 20ms frame from the microphone."""
        if self.readyState != "live" or self.stopped:
            raise MediaStreamError

        data = await self._read()
        samples = np.frombuffer(data, np.int16)
        if self.meter:
            self.meter.measure(samples if self.enabled else np.zeros(0, np.int16))
        if not self.enabled:
            samples = np.zeros_like(samples)

        frame = av.AudioFrame.from_ndarray(samples.reshape(1, -1), format="s16", layout="mono")
        frame.sample_rate = self.sample_rate
        frame.pts = self.timestamp
        frame.time_base = fractions.Fraction(1, self.sample_rate)
        self.timestamp += len(samples)
        return frame

    def stop(self):
        """Stop the microphone stream and release the device."""
        if self.stopped:
            return
        self.stopped = True
        self._release_stream()
        super().stop()
        logger.info("Microphone stopped")


class SpeakerSink:
    """Plays agent audio on the local output device."""

    def __init__(self):
        self._pyaudio = _load_pyaudio()
        self._pa = None
        self._stream = None
        self._format = None
        self._task: Optional[asyncio.Task] = None

    def start(self, track: MediaStreamTrack):
        """Consume a remote audio track until it ends."""
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(self._pump(track))

    async def _pump(self, track: MediaStreamTrack):
        try:
            while True:
                frame = await track.recv()
                await self.play(
                    frame.to_ndarray().tobytes(),
                    frame.sample_rate,
                    len(frame.layout.channels),
                )
        except MediaStreamError:
            logger.info("Remote audio track ended")

    async def play(self, pcm: bytes, sample_rate: int = REALTIME_SAMPLE_RATE, channels: int = AUDIO_CHANNELS):
        """Write 16-bit PCM to the output device, reopening it if the format changes."""
        if self._format != (sample_rate, channels):
            self._close_stream()
            self._pa = self._pyaudio.PyAudio()
            self._stream = self._pa.open(
                format=self._pyaudio.paInt16,
                channels=channels,
                rate=sample_rate,
                output=True,
            )
            self._format = (sample_rate, channels)
        await asyncio.to_thread(self._stream.write, pcm)

    def _close_stream(self):
        if self._stream is not None:
            self._stream.stop_stream()
            self._stream.close()
            self._stream = None
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None
        self._format = None

    async def close(self):
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._close_stream()
