"""
Transcript and audio level state for display.

Final transcript entries are append-only. Each speaker has at most one
in-progress entry; when it is finalized the final entry keeps the same id so
a renderer replaces it in place.
"""

import logging
from typing import Callable, Dict, List, Optional

from receptionist.config.constants import LOGGER_NAME
from receptionist.models.conversation import (
    ConversationStatus,
    ConversationView,
    Speaker,
    TranscriptEntry,
)

logger = logging.getLogger(LOGGER_NAME)

TranscriptCallback = Callable[[TranscriptEntry], None]
LevelCallback = Callable[[float], None]


class TranscriptPresenter:
    def __init__(
        self,
        on_transcript: Optional[TranscriptCallback] = None,
        on_audio_level: Optional[LevelCallback] = None,
    ):
        self.on_transcript = on_transcript
        self.on_audio_level = on_audio_level
        self._finals: List[TranscriptEntry] = []
        self._partials: Dict[Speaker, TranscriptEntry] = {}
        self.audio_level = 0.0

    @property
    def entries(self) -> List[TranscriptEntry]:
        """Final entries in order, followed by any in-progress entries."""
        partials = [self._partials[s] for s in (Speaker.USER, Speaker.AGENT) if s in self._partials]
        return list(self._finals) + partials

    @property
    def final_entries(self) -> List[TranscriptEntry]:
        return list(self._finals)

    def in_progress(self, speaker: Speaker) -> Optional[TranscriptEntry]:
        return self._partials.get(speaker)

    def append_partial(self, speaker: Speaker, delta: str) -> TranscriptEntry:
        """Extend the speaker's in-progress entry, starting one if needed."""
        current = self._partials.get(speaker)
        if current is None:
            entry = TranscriptEntry(speaker=speaker, text=delta, isFinal=False)
        else:
            entry = current.model_copy(update={"text": current.text + delta})
        self._partials[speaker] = entry
        self._emit(entry)
        return entry

    def finalize(self, speaker: Speaker, text: Optional[str] = None) -> Optional[TranscriptEntry]:
        """
        Commit the speaker's utterance as a final entry.

        The finalized text wins over accumulated deltas, which are used only
        when the provider sends an empty final. Empty utterances are dropped.
        """
        current = self._partials.pop(speaker, None)
        final_text = (text or "").strip()
        if not final_text and current is not None:
            final_text = current.text.strip()
        if not final_text:
            return None

        if current is None:
            entry = TranscriptEntry(speaker=speaker, text=final_text)
        else:
            entry = current.model_copy(update={"text": final_text, "isFinal": True})
        self._finals.append(entry)
        self._emit(entry)
        return entry

    def add_final(self, speaker: Speaker, text: str) -> TranscriptEntry:
        """Record a complete utterance that never had partials, such as typed text."""
        entry = TranscriptEntry(speaker=speaker, text=text)
        self._finals.append(entry)
        self._emit(entry)
        return entry

    def set_audio_level(self, level: float):
        self.audio_level = min(1.0, max(0.0, level))
        if self.on_audio_level:
            self.on_audio_level(self.audio_level)

    def snapshot(
        self,
        status: ConversationStatus,
        muted: bool = False,
        last_error: Optional[str] = None,
    ) -> ConversationView:
        return ConversationView(
            status=status,
            entries=self.entries,
            audioLevel=self.audio_level,
            muted=muted,
            lastError=last_error,
        )

    def _emit(self, entry: TranscriptEntry):
        if self.on_transcript:
            self.on_transcript(entry)
