"""Drive a single subtitle or narration run from source video to result.

A run walks a fixed sequence of stages::

    acquire_source -> extract_audio -> transcribe -> transform
        -> produce_output -> deliver -> cleanup

Every temporary artifact is registered with the run's :class:`RunWorkspace`
as soon as its path is chosen, and the workspace is cleaned up in a
``finally`` block whichever stage the run ends in. Stage failures surface as
:class:`PipelineError` subclasses; anything else is wrapped in
:class:`InternalError`.
"""

from __future__ import annotations

import base64
import contextvars
import re
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO, List, Optional, Protocol, Union

from shared.config import settings
from shared.logging import log_error, log_info
from shared.types import Mode, NarrationResult, Segment, VideoResult

from . import download, ffmpeg
from .errors import InternalError, PipelineError, SourceUnavailable
from .subtitles import format_srt, write_srt
from .workspace import RunWorkspace

_SUFFIX_RE = re.compile(r"^\.[A-Za-z0-9]{1,5}$")

AUDIO_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "aac": "audio/aac",
}

PipelineResult = Union[VideoResult, NarrationResult]


class Transcriber(Protocol):
    def transcribe(self, audio_path: Path, language: str) -> List[Segment]: ...


class TextGenerator(Protocol):
    def translate(self, text: str) -> str: ...

    def narration_script(self, transcript: str) -> str: ...


class Synthesizer(Protocol):
    def synthesize(self, text: str) -> bytes: ...


class UploadSource:
    """Video bytes posted by the client."""

    def __init__(self, stream: BinaryIO, filename: str | None = None) -> None:
        self.stream = stream
        self.filename = filename or ""

    def describe(self) -> str:
        return f"upload:{self.filename or '<unnamed>'}"

    def acquire(self, workspace: RunWorkspace) -> Path:
        suffix = Path(self.filename).suffix.lower()
        if not _SUFFIX_RE.match(suffix):
            suffix = ".mp4"
        dest = workspace.path(f"video{suffix}")
        with open(dest, "wb") as out:
            shutil.copyfileobj(self.stream, out)
        if dest.stat().st_size == 0:
            raise SourceUnavailable("Uploaded video is empty")
        return dest


class UrlSource:
    """Video fetched from a remote URL into the scratch directory."""

    def __init__(self, url: str) -> None:
        self.url = url

    def describe(self) -> str:
        return f"url:{self.url}"

    def acquire(self, workspace: RunWorkspace) -> Path:
        path = download.fetch_video(self.url, workspace.create())
        return workspace.register(path)


Source = Union[UploadSource, UrlSource]


class Pipeline:
    """Sequence the external tools for one request."""

    def __init__(
        self,
        transcriber: Transcriber,
        generator: TextGenerator,
        synthesizer: Optional[Synthesizer] = None,
        *,
        workspace_root: Path | None = None,
        translation_workers: int | None = None,
        min_duration_ms: int | None = None,
    ) -> None:
        self.transcriber = transcriber
        self.generator = generator
        self.synthesizer = synthesizer
        self.workspace_root = workspace_root
        self.translation_workers = max(
            translation_workers if translation_workers is not None else settings.TRANSLATION_WORKERS,
            1,
        )
        self.min_duration_ms = (
            min_duration_ms if min_duration_ms is not None else settings.MIN_SUBTITLE_DURATION_MS
        )

    def run(self, source: Source, mode: Mode) -> PipelineResult:
        workspace = RunWorkspace(self.workspace_root)
        run_id = workspace.run_id
        log_info("run_start", run_id=run_id, mode=mode.value, source=source.describe())
        try:
            self._stage(run_id, "acquire_source")
            video = source.acquire(workspace)

            self._stage(run_id, "extract_audio")
            audio = ffmpeg.extract_audio(video, workspace.path("audio.wav"))

            self._stage(run_id, "transcribe")
            segments = self.transcriber.transcribe(audio, self._language(mode))

            if mode is Mode.SUBTITLE:
                result: PipelineResult = self._subtitle(run_id, workspace, video, segments)
            else:
                result = self._narrate(run_id, workspace, segments)
            log_info("run_done", run_id=run_id, mode=mode.value)
            return result
        except PipelineError as exc:
            log_error("run_failed", run_id=run_id, kind=exc.kind, message=exc.message)
            raise
        except Exception as exc:
            log_error(
                "run_failed",
                run_id=run_id,
                kind=InternalError.kind,
                error_class=exc.__class__.__name__,
                message=str(exc),
            )
            raise InternalError(f"Unexpected error: {exc}") from exc
        finally:
            self._stage(run_id, "cleanup")
            workspace.cleanup()

    def translate_segments(self, segments: List[Segment]) -> List[Segment]:
        """Translate non-blank ``segments`` keeping their order and timing."""
        pending = [seg for seg in segments if seg.text.strip()]
        if self.translation_workers == 1 or len(pending) < 2:
            texts = [self.generator.translate(seg.text) for seg in pending]
        else:
            pool = ThreadPoolExecutor(max_workers=self.translation_workers)
            try:
                futures = [
                    pool.submit(contextvars.copy_context().run, self.generator.translate, seg.text)
                    for seg in pending
                ]
                texts = [f.result() for f in futures]
            finally:
                pool.shutdown(wait=True, cancel_futures=True)
        return [seg.with_text(text) for seg, text in zip(pending, texts)]

    def _subtitle(
        self,
        run_id: str,
        workspace: RunWorkspace,
        video: Path,
        segments: List[Segment],
    ) -> VideoResult:
        self._stage(run_id, "transform")
        translated = self.translate_segments(segments)
        srt_text = format_srt(translated, self.min_duration_ms)

        self._stage(run_id, "produce_output")
        output = workspace.path("output.mp4")
        if srt_text:
            srt_path = write_srt(srt_text, workspace.path("subtitles.srt"))
            ffmpeg.burn_subtitles(video, srt_path, output)
        else:
            log_info("subtitles_empty", run_id=run_id, segments=len(segments))
            ffmpeg.copy_video(video, output)

        self._stage(run_id, "deliver")
        return VideoResult(content=output.read_bytes())

    def _narrate(
        self,
        run_id: str,
        workspace: RunWorkspace,
        segments: List[Segment],
    ) -> NarrationResult:
        self._stage(run_id, "transform")
        transcript = " ".join(seg.text.strip() for seg in segments if seg.text.strip())
        if self.synthesizer is None:
            raise InternalError("Narration requires a speech synthesis client")
        script = self.generator.narration_script(transcript)
        audio = self.synthesizer.synthesize(script)

        self._stage(run_id, "produce_output")
        fmt = getattr(self.synthesizer, "audio_format", None) or settings.TTS_FORMAT
        out = workspace.path(f"podcast.{fmt}")
        out.write_bytes(audio)
        data = out.read_bytes()
        media_type = AUDIO_MEDIA_TYPES.get(fmt.lower(), f"audio/{fmt.lower()}")
        data_uri = f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"

        self._stage(run_id, "deliver")
        return NarrationResult(data_uri=data_uri, byte_length=len(data))

    def _language(self, mode: Mode) -> str:
        if mode is Mode.SUBTITLE:
            return settings.SUBTITLE_SOURCE_LANGUAGE
        return settings.NARRATION_SOURCE_LANGUAGE

    @staticmethod
    def _stage(run_id: str, name: str) -> None:
        log_info("stage", run_id=run_id, stage=name)


__all__ = [
    "Pipeline",
    "PipelineResult",
    "UploadSource",
    "UrlSource",
    "Source",
    "AUDIO_MEDIA_TYPES",
]
