"""Error taxonomy surfaced by pipeline runs and the HTTP layer."""

from __future__ import annotations


class PipelineError(RuntimeError):
    """Base class carrying a machine-readable ``kind`` and an HTTP status."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class BadRequest(PipelineError):
    """A required input (media source or credential) is missing."""

    kind = "bad_request"
    status_code = 400


class MethodNotAllowed(PipelineError):
    kind = "method_not_allowed"
    status_code = 405


class SourceUnavailable(PipelineError):
    """No usable media file could be obtained."""

    kind = "source_unavailable"


class TranscodeError(PipelineError):
    """ffmpeg failed or timed out."""

    kind = "transcode_error"


class TranscriptionUnavailable(PipelineError):
    """Speech recognition returned no segment data."""

    kind = "transcription_unavailable"


class GenerationFailed(PipelineError):
    """Translation or script generation failed."""

    kind = "generation_failed"


class SynthesisFailed(PipelineError):
    """Speech synthesis failed or returned no audio."""

    kind = "synthesis_failed"


class InternalError(PipelineError):
    kind = "internal_error"


__all__ = [
    "PipelineError",
    "BadRequest",
    "MethodNotAllowed",
    "SourceUnavailable",
    "TranscodeError",
    "TranscriptionUnavailable",
    "GenerationFailed",
    "SynthesisFailed",
    "InternalError",
]
