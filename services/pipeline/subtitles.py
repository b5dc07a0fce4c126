"""SRT rendering for transcription segments."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from shared.config import settings
from shared.types import Segment, SubtitleEntry


def format_timestamp(ms: int) -> str:
    """Return ``HH:MM:SS,mmm`` for ``ms``; hours are not wrapped at 24."""
    h = ms // 3_600_000
    m = (ms % 3_600_000) // 60_000
    s = (ms % 60_000) // 1000
    millis = ms % 1000
    return f"{h:02}:{m:02}:{s:02},{millis:03}"


def build_entries(
    segments: Iterable[Segment], min_duration_ms: Optional[int] = None
) -> List[SubtitleEntry]:
    """Number the non-blank ``segments`` in input order.

    Blank segments consume no index. Each entry lasts at least
    ``min_duration_ms`` from its original start, defaulting to
    ``settings.MIN_SUBTITLE_DURATION_MS``.
    """
    if min_duration_ms is None:
        min_duration_ms = settings.MIN_SUBTITLE_DURATION_MS
    entries: List[SubtitleEntry] = []
    for seg in segments:
        text = seg.text.strip()
        if not text:
            continue
        duration = max(seg.end_ms - seg.start_ms, min_duration_ms)
        entries.append(
            SubtitleEntry(
                index=len(entries) + 1,
                start_ms=seg.start_ms,
                end_ms=seg.start_ms + duration,
                text=text,
            )
        )
    return entries


def render_srt(entries: Iterable[SubtitleEntry]) -> str:
    blocks = [
        f"{e.index}\n{format_timestamp(e.start_ms)} --> {format_timestamp(e.end_ms)}\n{e.text}\n\n"
        for e in entries
    ]
    return "".join(blocks)


def format_srt(segments: Iterable[Segment], min_duration_ms: Optional[int] = None) -> str:
    """Render ``segments`` as SRT text; empty string when nothing survives."""
    return render_srt(build_entries(segments, min_duration_ms))


def write_srt(text: str, dest: Path) -> Path:
    dest.write_text(text, encoding="utf-8")
    return dest


__all__ = [
    "format_timestamp",
    "build_entries",
    "render_srt",
    "format_srt",
    "write_srt",
]
