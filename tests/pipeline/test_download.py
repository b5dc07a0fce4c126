from pathlib import Path

import pytest
from yt_dlp.utils import DownloadError

from services.pipeline import download
from services.pipeline.errors import SourceUnavailable


def _fake_ydl(write=("video.mp4",), error=None, seen=None):
    class FakeYDL:
        def __init__(self, opts):
            self.opts = opts
            if seen is not None:
                seen.append(opts)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def download(self, urls):
            if error:
                raise error
            folder = Path(self.opts["outtmpl"]).parent
            for name in write:
                (folder / name).write_bytes(b"data")
            return 0

    return FakeYDL


def test_fetch_video_returns_downloaded_file(tmp_path, monkeypatch):
    seen = []
    monkeypatch.setattr(download.yt_dlp, "YoutubeDL", _fake_ydl(seen=seen))
    path = download.fetch_video("https://youtu.be/x", tmp_path)
    assert path == tmp_path / "video.mp4"
    assert seen[0]["outtmpl"] == str(tmp_path / "video.%(ext)s")
    assert seen[0]["format"] == "best"


def test_partial_files_are_ignored(tmp_path, monkeypatch):
    monkeypatch.setattr(
        download.yt_dlp, "YoutubeDL", _fake_ydl(write=("video.mp4.part", "video.webm"))
    )
    assert download.fetch_video("https://youtu.be/x", tmp_path).name == "video.webm"


def test_missing_file_is_source_unavailable(tmp_path, monkeypatch):
    monkeypatch.setattr(download.yt_dlp, "YoutubeDL", _fake_ydl(write=("other.mp4",)))
    with pytest.raises(SourceUnavailable):
        download.fetch_video("https://youtu.be/x", tmp_path)


def test_download_error_is_source_unavailable(tmp_path, monkeypatch):
    monkeypatch.setattr(
        download.yt_dlp, "YoutubeDL", _fake_ydl(error=DownloadError("unavailable"))
    )
    with pytest.raises(SourceUnavailable, match="unavailable"):
        download.fetch_video("https://youtu.be/x", tmp_path)
