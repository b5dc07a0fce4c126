"""Whisper speech recognition over the OpenAI-compatible HTTP API."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import requests

from shared.config import settings
from shared.logging import log_error, log_info
from shared.types import Segment

from .errors import TranscriptionUnavailable


def _to_ms(seconds: Any) -> int:
    return max(int(round(float(seconds) * 1000)), 0)


def segments_from_response(data: dict[str, Any]) -> List[Segment]:
    """Convert a ``verbose_json`` payload into ordered segments."""
    raw = data.get("segments") if isinstance(data, dict) else None
    if raw is None:
        raise TranscriptionUnavailable("Transcription returned no segment data")
    segments: List[Segment] = []
    try:
        for item in raw:
            text = item.get("text") or ""
            if not isinstance(text, str):
                raise TypeError(f"segment text must be a string, got {type(text).__name__}")
            start = _to_ms(item.get("start", 0.0))
            end = max(_to_ms(item.get("end", 0.0)), start)
            segments.append(Segment(start, end, text.strip()))
    except (AttributeError, TypeError, ValueError) as exc:
        raise TranscriptionUnavailable(f"Transcription returned malformed segments: {exc}") from exc
    return segments


class WhisperClient:
    """Submit audio files to ``/audio/transcriptions`` with segment timestamps."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str | None = None,
        base_url: str | None = None,
        session: requests.sessions.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or settings.WHISPER_MODEL
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.session = session

    def transcribe(self, audio_path: Path, language: str) -> List[Segment]:
        sess = self.session or requests
        url = f"{self.base_url}/audio/transcriptions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = {
            "model": self.model,
            "response_format": "verbose_json",
            "timestamp_granularities[]": "segment",
            "language": language,
        }
        try:
            with open(audio_path, "rb") as fh:
                resp = sess.post(
                    url,
                    headers=headers,
                    data=data,
                    files={"file": (audio_path.name, fh, "audio/wav")},
                    timeout=settings.API_TIMEOUT_SEC,
                )
            resp.raise_for_status()
            payload = resp.json()
        except requests.Timeout as exc:
            log_error("transcribe_timeout", timeout_sec=settings.API_TIMEOUT_SEC)
            raise TranscriptionUnavailable("Transcription timed out") from exc
        except (requests.RequestException, ValueError) as exc:
            log_error("transcribe_fail", error=str(exc))
            raise TranscriptionUnavailable(f"Transcription failed: {exc}") from exc

        segments = segments_from_response(payload)
        log_info("transcribe", language=language, segments=len(segments))
        return segments


__all__ = ["WhisperClient", "segments_from_response"]
