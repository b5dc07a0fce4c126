import shutil
import subprocess
import wave
from pathlib import Path

import pytest

from services.pipeline import ffmpeg
from services.pipeline.errors import TranscodeError


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        Path(cmd[-1]).write_bytes(b"out")
        return subprocess.CompletedProcess(cmd, 0, "", "")


def test_extract_audio_normalises_to_16k_mono_pcm(tmp_path, monkeypatch):
    src = tmp_path / "video.mp4"
    src.write_bytes(b"v")
    rec = Recorder()
    monkeypatch.setattr(subprocess, "run", rec)

    out = ffmpeg.extract_audio(src, tmp_path / "audio.wav")

    cmd, kwargs = rec.calls[0]
    assert out == tmp_path / "audio.wav"
    assert cmd[:4] == ["ffmpeg", "-y", "-i", str(src)]
    assert "pcm_s16le" in cmd
    assert cmd[cmd.index("-ar") + 1] == "16000"
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert kwargs["check"] is True
    assert kwargs["timeout"] > 0


def test_extract_audio_missing_source(tmp_path):
    with pytest.raises(TranscodeError):
        ffmpeg.extract_audio(tmp_path / "missing.mp4", tmp_path / "audio.wav")


def test_burn_subtitles_applies_style_and_copies_audio(tmp_path, monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(subprocess, "run", rec)
    srt = tmp_path / "subtitles.srt"

    ffmpeg.burn_subtitles(tmp_path / "v.mp4", srt, tmp_path / "o.mp4", style="Alignment=2")

    cmd, _ = rec.calls[0]
    vf = cmd[cmd.index("-vf") + 1]
    assert vf.startswith("subtitles=filename='")
    assert "force_style='Alignment=2'" in vf
    assert cmd[cmd.index("-c:a") + 1] == "copy"


def test_burn_subtitles_uses_configured_style(tmp_path, monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(subprocess, "run", rec)
    ffmpeg.burn_subtitles(tmp_path / "v.mp4", tmp_path / "s.srt", tmp_path / "o.mp4")
    vf = rec.calls[0][0][rec.calls[0][0].index("-vf") + 1]
    assert "FontName=Noto Sans CJK JP" in vf
    assert "MarginV=35" in vf


def test_filter_path_is_escaped():
    assert ffmpeg._escape_filter_path(Path("/tmp/a:b/it's.srt")) == "/tmp/a\\:b/it\\'s.srt"


def test_copy_video_has_no_filters(tmp_path, monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(subprocess, "run", rec)
    ffmpeg.copy_video(tmp_path / "v.mp4", tmp_path / "o.mp4")
    cmd, _ = rec.calls[0]
    assert "-vf" not in cmd
    assert cmd[cmd.index("-c") + 1] == "copy"


def test_failure_logs_stderr_and_raises(tmp_path, monkeypatch):
    src = tmp_path / "v.mp4"
    src.write_bytes(b"v")
    logs = {}

    def fake_log_error(event, **fields):
        logs.update({"event": event, **fields})

    def fake_run(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0], stderr="boom")

    monkeypatch.setattr(ffmpeg, "log_error", fake_log_error)
    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(TranscodeError):
        ffmpeg.extract_audio(src, tmp_path / "a.wav")
    assert logs["event"] == "ffmpeg_fail"
    assert logs["exit_code"] == 1
    assert "boom" in logs["stderr"]


def test_timeout_is_a_transcode_error(tmp_path, monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(TranscodeError, match="timed out"):
        ffmpeg.copy_video(tmp_path / "v.mp4", tmp_path / "o.mp4")


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg required")
def test_extract_audio_real_ffmpeg(tmp_path):
    video = tmp_path / "v.mp4"
    subprocess.run(
        [
            "ffmpeg",
            "-f",
            "lavfi",
            "-i",
            "color=c=black:s=16x16:d=1",
            "-f",
            "lavfi",
            "-i",
            "sine=frequency=440:duration=1",
            "-shortest",
            str(video),
        ],
        check=True,
        capture_output=True,
    )
    out = ffmpeg.extract_audio(video, tmp_path / "a.wav")
    with wave.open(str(out), "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getframerate() == 16000
        assert wf.getsampwidth() == 2
