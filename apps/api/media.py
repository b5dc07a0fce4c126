"""Subtitle burn-in and narration endpoints."""

from __future__ import annotations

import threading
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from services.pipeline.errors import BadRequest, PipelineError
from services.pipeline.generation import ChatClient
from services.pipeline.orchestrator import Pipeline, Source, UploadSource, UrlSource
from services.pipeline.transcription import WhisperClient
from services.pipeline.tts import NijiVoiceClient
from shared.config import settings
from shared.logging import secret_scope
from shared.types import Mode

router = APIRouter(prefix="/api", tags=["media"])

# Routes whose failures are reported as JSON rather than plain text.
JSON_ERROR_PATHS = {"/api/generatePodcast"}

_run_slots = threading.BoundedSemaphore(max(settings.MAX_CONCURRENT, 1))


def error_response(path: str, exc: PipelineError) -> Response:
    """Render ``exc`` in the error format of the route at ``path``."""
    headers = {"X-Error-Kind": exc.kind}
    if path in JSON_ERROR_PATHS:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, **exc.to_dict()},
            headers=headers,
        )
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=headers)


def build_pipeline(api_key: str, tts_api_key: str | None = None) -> Pipeline:
    synthesizer = NijiVoiceClient(tts_api_key) if tts_api_key else None
    return Pipeline(
        transcriber=WhisperClient(api_key),
        generator=ChatClient(api_key),
        synthesizer=synthesizer,
    )


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


@router.post("/processVideo")
def process_video(
    video: Optional[UploadFile] = File(None),
    youtube_url: Optional[str] = Form(None, alias="youtubeUrl"),
    api_key: Optional[str] = Form(None, alias="apiKey"),
) -> Response:
    """Return the submitted video with translated subtitles burned in."""
    key = _clean(api_key) or settings.OPENAI_API_KEY
    url = _clean(youtube_url)
    has_upload = video is not None and bool(video.filename)
    if not (has_upload or url):
        raise BadRequest("A video file or a YouTube URL is required")
    if not key:
        raise BadRequest("An OpenAI API key is required")

    source: Source = UploadSource(video.file, video.filename) if has_upload else UrlSource(url)
    with secret_scope(key), _run_slots:
        result = build_pipeline(key).run(source, Mode.SUBTITLE)
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post("/generatePodcast")
def generate_podcast(
    youtube_url: Optional[str] = Form(None, alias="youtubeUrl"),
    api_key: Optional[str] = Form(None, alias="apiKey"),
    tts_api_key: Optional[str] = Form(None, alias="nijivoiceApiKey"),
) -> dict[str, object]:
    """Summarise the video's speech into a short narrated audio clip."""
    key = _clean(api_key) or settings.OPENAI_API_KEY
    tts_key = _clean(tts_api_key) or settings.NIJIVOICE_API_KEY
    url = _clean(youtube_url)
    if not tts_key:
        raise BadRequest("A NijiVoice API key is required")
    if not (url and key):
        raise BadRequest("A YouTube URL and an OpenAI API key are required")

    with secret_scope(key, tts_key), _run_slots:
        result = build_pipeline(key, tts_key).run(UrlSource(url), Mode.NARRATION)
    return {
        "success": True,
        "audioData": result.data_uri,
        # Same payload as ``audioData``; kept for existing front-ends.
        "audioUrl": result.data_uri,
        "message": result.message,
    }


__all__ = ["router", "build_pipeline", "error_response", "JSON_ERROR_PATHS"]
