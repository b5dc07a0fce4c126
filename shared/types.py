"""Shared data types for the subcast services."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


@dataclass(frozen=True)
class Segment:
    """Timed unit of recognised speech, in milliseconds."""

    start_ms: int
    end_ms: int
    text: str

    def __post_init__(self) -> None:
        if self.start_ms < 0:
            raise ValueError(f"start_ms must be non-negative, got {self.start_ms}")
        if self.end_ms < self.start_ms:
            raise ValueError(
                f"end_ms ({self.end_ms}) must not precede start_ms ({self.start_ms})"
            )

    def with_text(self, text: str) -> "Segment":
        """Return a copy with the same timing and ``text``."""
        return replace(self, text=text)


@dataclass(frozen=True)
class SubtitleEntry:
    """One rendered block of a subtitle stream."""

    index: int
    start_ms: int
    end_ms: int
    text: str


class Mode(str, Enum):
    """Which output a pipeline run produces."""

    SUBTITLE = "subtitle"
    NARRATION = "narration"


@dataclass(frozen=True)
class VideoResult:
    """Subtitled (or passed-through) video ready for download."""

    content: bytes
    media_type: str = "video/mp4"
    filename: str = "output.mp4"


@dataclass(frozen=True)
class NarrationResult:
    """Narration audio encoded as an inline data URI."""

    data_uri: str
    byte_length: int
    message: str = "Narration audio generated."


__all__ = ["Segment", "SubtitleEntry", "Mode", "VideoResult", "NarrationResult"]
