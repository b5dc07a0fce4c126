"""FFmpeg invocations for audio extraction and subtitle burn-in."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from shared.config import settings
from shared.logging import log_debug, log_error, log_info

from .errors import TranscodeError


def _escape_filter_path(path: Path) -> str:
    """Escape ``path`` for use inside an ffmpeg filter argument."""
    return (
        path.as_posix()
        .replace("\\", "\\\\")
        .replace(":", "\\:")
        .replace("'", "\\'")
    )


def _run(cmd: list[str], action: str) -> None:
    """Run ``cmd`` raising :class:`TranscodeError` on failure or timeout."""
    env = os.environ.copy()
    if os.getenv("DEBUG", "false").lower() == "true":
        ffreport = Path(settings.TMP_DIR) / f"ffreport-{action}.log"
        ffreport.parent.mkdir(parents=True, exist_ok=True)
        env["FFREPORT"] = f"file={ffreport}:level=32"
        log_info("ffreport", path=str(ffreport))

    log_debug("ffmpeg_cmd", action=action, argv=cmd)
    try:
        subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            env=env,
            timeout=settings.TRANSCODE_TIMEOUT_SEC,
        )
    except subprocess.CalledProcessError as exc:
        snippet = (exc.stderr or "")[-200:]
        log_error("ffmpeg_fail", action=action, exit_code=exc.returncode, stderr=snippet)
        raise TranscodeError(f"ffmpeg {action} failed (exit {exc.returncode})") from exc
    except subprocess.TimeoutExpired as exc:
        log_error("ffmpeg_timeout", action=action, timeout_sec=settings.TRANSCODE_TIMEOUT_SEC)
        raise TranscodeError(
            f"ffmpeg {action} timed out after {settings.TRANSCODE_TIMEOUT_SEC}s"
        ) from exc
    except FileNotFoundError as exc:
        log_error("ffmpeg_missing", action=action, error=str(exc))
        raise TranscodeError("ffmpeg executable not found") from exc


def extract_audio(src: Path, dest: Path) -> Path:
    """Convert the audio track of ``src`` to 16 kHz mono PCM WAV at ``dest``."""
    if not src.exists():
        raise TranscodeError(f"source media not found: {src.name}")
    _run(
        [
            "ffmpeg",
            "-y",
            "-i",
            str(src),
            "-vn",
            "-acodec",
            "pcm_s16le",
            "-ar",
            "16000",
            "-ac",
            "1",
            str(dest),
        ],
        "extract_audio",
    )
    return dest


def burn_subtitles(video: Path, subtitles: Path, dest: Path, style: str | None = None) -> Path:
    """Composite ``subtitles`` into the frames of ``video``; audio is copied."""
    force_style = style if style is not None else settings.SUBTITLE_FORCE_STYLE
    vf = f"subtitles=filename='{_escape_filter_path(subtitles)}'"
    if force_style:
        vf += f":force_style='{force_style}'"
    _run(
        [
            "ffmpeg",
            "-y",
            "-i",
            str(video),
            "-vf",
            vf,
            "-c:a",
            "copy",
            str(dest),
        ],
        "burn_subtitles",
    )
    return dest


def copy_video(video: Path, dest: Path) -> Path:
    """Remux ``video`` to ``dest`` without re-encoding or filters."""
    _run(["ffmpeg", "-y", "-i", str(video), "-c", "copy", str(dest)], "copy_video")
    return dest


__all__ = ["extract_audio", "burn_subtitles", "copy_video"]
