"""Subtitle and narration pipeline components."""

from . import download, ffmpeg, generation, orchestrator, subtitles, transcription, tts, workspace

__all__ = [
    "download",
    "ffmpeg",
    "generation",
    "orchestrator",
    "subtitles",
    "transcription",
    "tts",
    "workspace",
]
