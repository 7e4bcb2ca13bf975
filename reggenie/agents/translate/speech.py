"""Read-aloud support for translated pages.

The client plays audio and reports word boundaries as character offsets into
the text it was given; ReadingCursor maps them back onto the page so the
reviewer sees the spoken word highlighted and can pause and resume.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from reggenie.agents.llm.client import synthesize_speech

logger = logging.getLogger(__name__)

LOCALE_MAP = {
    "English": "en-US",
    "Spanish": "es-ES",
    "French": "fr-FR",
    "German": "de-DE",
    "Chinese": "zh-CN",
    "Traditional Chinese": "zh-TW",
    "Japanese": "ja-JP",
    "Tamil": "ta-IN",
    "Hindi": "hi-IN",
    "Portuguese": "pt-PT",
    "Italian": "it-IT",
    "Russian": "ru-RU",
    "Korean": "ko-KR",
    "Arabic": "ar-SA",
    "Thai": "th-TH",
    "Vietnamese": "vi-VN",
    "Turkish": "tr-TR",
    "Polish": "pl-PL",
    "Dutch": "nl-NL",
    "Greek": "el-GR",
    "Czech": "cs-CZ",
}

DEFAULT_LOCALE = "en-US"

FEMALE_VOICE_HINTS = ("female", "samantha", "zira", "victoria", "monica")

# Synthesized voice used for server-side speech
DEFAULT_SPEECH_VOICE = "nova"


@dataclass
class Voice:
    name: str
    lang: str


def locale_for(language: str) -> str:
    return LOCALE_MAP.get(language, DEFAULT_LOCALE)


def select_voice(voices: List[Voice], language: str) -> Optional[Voice]:
    """Prefer a female-named voice for the language, else its first voice."""
    prefix = locale_for(language).split("-")[0]
    candidates = [v for v in voices if v.lang.startswith(prefix)]

    for voice in candidates:
        name = voice.name.lower()
        if any(hint in name for hint in FEMALE_VOICE_HINTS):
            return voice
    return candidates[0] if candidates else None


class ReadingCursor:
    """Playback position over one page of text."""

    def __init__(self, text: str):
        self.text = text
        self.last_char_index = 0
        self.highlighted_word_index: Optional[int] = None
        self.reading = False
        self.paused = False
        self._offset = 0

    def start(self, start_index: Optional[int] = None) -> str:
        """Begin reading at start_index (default: where the last read stopped).

        Returns the text to hand to the speech engine; empty when nothing
        remains to be read.
        """
        if start_index is None:
            start_index = self.last_char_index
        remaining = self.text[start_index:]
        if not remaining.strip():
            return ""

        self._offset = start_index
        self.reading = True
        self.paused = False
        return remaining

    def boundary(self, char_index: int) -> int:
        """Record a word boundary reported relative to the spoken text."""
        absolute = self._offset + char_index
        self.last_char_index = absolute
        self.highlighted_word_index = len(self.text[:absolute].split())
        return self.highlighted_word_index

    def pause(self) -> None:
        if self.reading:
            self.paused = True

    def end(self) -> None:
        # A pause cancels playback too; only a natural end rewinds
        if self.paused:
            return
        self.reading = False
        self.last_char_index = 0
        self.highlighted_word_index = None

    def state(self) -> Dict[str, object]:
        return {
            "reading": self.reading,
            "paused": self.paused,
            "last_char_index": self.last_char_index,
            "highlighted_word_index": self.highlighted_word_index,
        }


# Cursors per (job, page), least recently used first
MAX_READERS = 128

_readers: "OrderedDict[Tuple[str, int], ReadingCursor]" = OrderedDict()
_readers_lock = threading.Lock()


def get_reader(log_id: str, page_index: int, text: str) -> ReadingCursor:
    """Cursor for a page; a page whose text changed gets a fresh cursor."""
    key = (log_id, page_index)
    with _readers_lock:
        cursor = _readers.get(key)
        if cursor is None or cursor.text != text:
            cursor = ReadingCursor(text)
            _readers[key] = cursor
        _readers.move_to_end(key)
        while len(_readers) > MAX_READERS:
            _readers.popitem(last=False)
        return cursor


def clear_readers() -> None:
    with _readers_lock:
        _readers.clear()


def synthesize_page(text: str, voice: str = DEFAULT_SPEECH_VOICE) -> bytes:
    if not text.strip():
        raise ValueError("Nothing to read")
    audio = synthesize_speech(text, voice=voice)
    logger.info(f"Synthesized {len(audio)} bytes of speech for {len(text)} characters")
    return audio
