"""
Tests for local audio media: listening policy, level meter and microphone track.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from aiortc.mediastreams import MediaStreamError

from receptionist.bot.media import AudioLevelMeter, ListeningPolicy, MicrophoneStreamTrack
from receptionist.exceptions import MediaAccessError
from receptionist.models.conversation import ConversationStatus

S = ConversationStatus


class TestListeningPolicy:

    @pytest.mark.parametrize("status", [S.CONNECTED, S.LISTENING])
    def test_restarts_while_listening(self, status):
        assert ListeningPolicy().should_restart(status, stopped=False) is True

    @pytest.mark.parametrize("status", [S.PROCESSING, S.SPEAKING, S.ERROR, S.DISCONNECTED])
    def test_stays_down_while_busy_or_finished(self, status):
        assert ListeningPolicy().should_restart(status, stopped=False) is False

    def test_never_restarts_after_stop(self):
        assert ListeningPolicy().should_restart(S.LISTENING, stopped=True) is False


class TestAudioLevelMeter:

    def test_silence_stays_at_zero(self):
        meter = AudioLevelMeter()
        assert meter.measure(np.zeros(960, np.int16)) == 0.0

    def test_level_is_smoothed_and_clamped(self):
        levels = []
        meter = AudioLevelMeter(smoothing=0.5, on_level=levels.append)
        loud = np.full(960, 32767, np.int16)

        first = meter.measure(loud)
        second = meter.measure(loud)

        assert first == pytest.approx(0.5)
        assert second == pytest.approx(0.75)
        for _ in range(50):
            meter.measure(loud)
        assert meter.level <= 1.0
        assert levels[0] == pytest.approx(0.5)

    def test_close_resets_to_silence(self):
        levels = []
        meter = AudioLevelMeter(smoothing=1.0, on_level=levels.append)
        meter.measure(np.full(960, 10000, np.int16))

        meter.close()

        assert levels[-1] == 0.0
        assert meter.measure(np.full(960, 10000, np.int16)) == 0.0
        assert len(levels) == 2


def fake_pyaudio(stream=None, open_error=None):
    module = MagicMock()
    module.paInt16 = 8
    pa = module.PyAudio.return_value
    if open_error:
        pa.open.side_effect = open_error
    else:
        pa.open.return_value = stream or MagicMock()
    return module


@pytest.mark.asyncio
class TestMicrophoneStreamTrack:

    async def test_open_failure_raises_media_access_error(self):
        module = fake_pyaudio(open_error=OSError("No default input device"))
        with patch("receptionist.bot.media._load_pyaudio", return_value=module):
            with pytest.raises(MediaAccessError):
                MicrophoneStreamTrack()
        module.PyAudio.return_value.terminate.assert_called_once()

    async def test_recv_returns_timed_frames(self):
        stream = MagicMock()
        stream.read.return_value = np.full(960, 1000, np.int16).tobytes()
        meter = AudioLevelMeter(smoothing=1.0)
        with patch("receptionist.bot.media._load_pyaudio", return_value=fake_pyaudio(stream)):
            track = MicrophoneStreamTrack(meter=meter)

        first = await track.recv()
        second = await track.recv()

        assert first.sample_rate == 48000
        assert first.samples == 960
        assert first.pts == 0
        assert second.pts == 960
        assert meter.level > 0
        track.stop()

    async def test_muted_track_sends_silence(self):
        stream = MagicMock()
        stream.read.return_value = np.full(960, 1000, np.int16).tobytes()
        meter = AudioLevelMeter(smoothing=1.0)
        with patch("receptionist.bot.media._load_pyaudio", return_value=fake_pyaudio(stream)):
            track = MicrophoneStreamTrack(meter=meter)
        track.enabled = False

        frame = await track.recv()

        assert not frame.to_ndarray().any()
        assert meter.level == 0.0
        track.stop()

    async def test_read_failure_waits_while_agent_speaks(self):
        stream = MagicMock()
        stream.read.side_effect = OSError("Input overflowed")
        module = fake_pyaudio(stream)
        status = {"value": S.SPEAKING}
        with patch("receptionist.bot.media._load_pyaudio", return_value=module):
            track = MicrophoneStreamTrack(status_provider=lambda: status["value"])

            await track.recv()
            await track.recv()

            assert module.PyAudio.call_count == 1

            status["value"] = S.LISTENING
            stream.read.side_effect = None
            stream.read.return_value = bytes(1920)
            await track.recv()

            assert module.PyAudio.call_count == 2
        track.stop()

    async def test_stop_is_idempotent_and_ends_track(self):
        stream = MagicMock()
        with patch("receptionist.bot.media._load_pyaudio", return_value=fake_pyaudio(stream)):
            track = MicrophoneStreamTrack()

        track.stop()
        track.stop()

        stream.close.assert_called_once()
        with pytest.raises(MediaStreamError):
            await track.recv()
