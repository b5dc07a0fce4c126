"""Translation and narration scripts via the chat completions API."""

from __future__ import annotations

import requests

from shared.config import settings
from shared.logging import log_debug, log_error, log_info

from .errors import GenerationFailed

TRANSLATE_PROMPT = (
    "Translate the following spoken line into natural {language}. "
    "Keep the context and conversational nuance, and reply with the "
    "translation only:\n\n{text}"
)

NARRATION_PROMPT = (
    "Using the transcript below, write a podcast script in {language} that "
    "explains the main points of the video in an entertaining, friendly way, "
    "using metaphors where they help. Write it as natural speech for a "
    "listener. Keep it to about {chars} characters.\n\nTranscript:\n{transcript}"
)


class ChatClient:
    """Thin client for ``/chat/completions`` returning the first reply."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str | None = None,
        base_url: str | None = None,
        language: str | None = None,
        session: requests.sessions.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or settings.CHAT_MODEL
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.language = language or settings.TARGET_LANGUAGE
        self.session = session

    def complete(self, prompt: str, temperature: float) -> str:
        sess = self.session or requests
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        try:
            resp = sess.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=settings.API_TIMEOUT_SEC,
            )
            resp.raise_for_status()
            content = resp.json()["choices"][0]["message"]["content"]
        except requests.Timeout as exc:
            log_error("chat_timeout", timeout_sec=settings.API_TIMEOUT_SEC)
            raise GenerationFailed("Text generation timed out") from exc
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as exc:
            log_error("chat_fail", error_class=exc.__class__.__name__, error=str(exc))
            raise GenerationFailed(f"Text generation failed: {exc}") from exc
        return (content or "").strip()

    def translate(self, text: str) -> str:
        prompt = TRANSLATE_PROMPT.format(language=self.language, text=text)
        result = self.complete(prompt, settings.TRANSLATION_TEMPERATURE)
        log_debug("translate", source=text, result=result)
        return result

    def narration_script(self, transcript: str) -> str:
        prompt = NARRATION_PROMPT.format(
            language=self.language,
            chars=settings.NARRATION_SCRIPT_CHARS,
            transcript=transcript,
        )
        script = self.complete(prompt, settings.SCRIPT_TEMPERATURE)
        if not script:
            raise GenerationFailed("Narration script was empty")
        log_info("narration_script", chars=len(script), script=script)
        return script


__all__ = ["ChatClient", "TRANSLATE_PROMPT", "NARRATION_PROMPT"]
