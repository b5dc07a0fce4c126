"""NijiVoice text-to-speech client."""

from __future__ import annotations

import requests

from shared.config import settings
from shared.logging import log_error, log_info

from .errors import SynthesisFailed


class NijiVoiceClient:
    """Generate narration audio with a fixed voice actor."""

    def __init__(
        self,
        api_key: str,
        *,
        voice_actor_id: str | None = None,
        base_url: str | None = None,
        audio_format: str | None = None,
        session: requests.sessions.Session | None = None,
    ) -> None:
        if not api_key:
            raise SynthesisFailed("Speech synthesis API key was not provided")
        self.api_key = api_key
        self.voice_actor_id = voice_actor_id or settings.NIJIVOICE_VOICE_ACTOR_ID
        self.base_url = (base_url or settings.NIJIVOICE_BASE_URL).rstrip("/")
        self.audio_format = audio_format or settings.TTS_FORMAT
        self.session = session

    def synthesize(self, text: str) -> bytes:
        """Return encoded audio for ``text``."""
        sess = self.session or requests
        url = f"{self.base_url}/voice-actors/{self.voice_actor_id}/generate-voice"
        headers = {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "script": text,
            "speed": str(settings.TTS_SPEAKING_SPEED),
            "format": self.audio_format,
            "pitch": "0",
            "intonation": "1.0",
            "volume": "1.0",
        }
        try:
            resp = sess.post(url, json=payload, headers=headers, timeout=settings.API_TIMEOUT_SEC)
            resp.raise_for_status()
        except requests.Timeout as exc:
            log_error("tts_timeout", timeout_sec=settings.API_TIMEOUT_SEC)
            raise SynthesisFailed("Speech synthesis timed out") from exc
        except requests.HTTPError as exc:
            status = getattr(exc.response, "status_code", None)
            log_error("tts_error", status=status, error=str(exc))
            raise SynthesisFailed(f"Speech synthesis failed: HTTP {status}") from exc
        except requests.RequestException as exc:
            log_error("tts_error", error=str(exc))
            raise SynthesisFailed(f"Speech synthesis failed: {exc}") from exc

        audio = resp.content
        if not audio:
            raise SynthesisFailed("Speech synthesis returned no audio")
        log_info("tts", chars=len(text), bytes=len(audio), format=self.audio_format)
        return audio


__all__ = ["NijiVoiceClient"]
