"""Fetch remote videos with yt-dlp."""

from __future__ import annotations

from pathlib import Path

import yt_dlp
from yt_dlp.utils import DownloadError

from shared.config import settings
from shared.logging import log_error, log_info

from .errors import SourceUnavailable

STEM = "video"
_PARTIAL_SUFFIXES = {".part", ".ytdl"}


def fetch_video(url: str, dest_dir: Path) -> Path:
    """Download ``url`` into ``dest_dir`` as ``video.<ext>`` and return its path."""
    ydl_opts = {
        "format": "best",
        "outtmpl": str(dest_dir / f"{STEM}.%(ext)s"),
        "quiet": True,
        "noprogress": True,
        "noplaylist": True,
        "socket_timeout": settings.DOWNLOAD_TIMEOUT_SEC,
    }
    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            ydl.download([url])
    except DownloadError as exc:
        log_error("download_fail", url=url, error=str(exc))
        raise SourceUnavailable(f"Failed to download video: {exc}") from exc

    matches = sorted(
        p
        for p in dest_dir.iterdir()
        if p.is_file()
        and p.name.startswith(f"{STEM}.")
        and p.suffix not in _PARTIAL_SUFFIXES
    )
    if not matches:
        log_error("download_missing", url=url, dir=str(dest_dir))
        raise SourceUnavailable("Downloaded video file not found")
    log_info("download", url=url, path=str(matches[0]), bytes=matches[0].stat().st_size)
    return matches[0]


__all__ = ["fetch_video"]
