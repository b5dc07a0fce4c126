"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

load_dotenv()


# Scratch directories for pipeline runs live below this path.
# The environment variable overrides the system temp directory.
TMP_DIR = Path(os.getenv("TMP_DIR", str(Path(tempfile.gettempdir()) / "subcast")))

DEFAULT_FORCE_STYLE = (
    "Alignment=2,FontName=Noto Sans CJK JP,FontSize=24,"
    "PrimaryColour=&HFFFFFF,OutlineColour=&H000000,"
    "BorderStyle=3,Outline=1,Shadow=0,MarginV=35"
)


class Settings(BaseSettings):
    """Application settings read from environment variables."""

    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    TMP_DIR: Path = Field(default=TMP_DIR)
    LOG_LEVEL: str = Field(
        default="INFO", description="Logging level"
    )

    # Concurrency and per-stage timeouts
    MAX_CONCURRENT: int = Field(
        default=2,
        description="Maximum pipeline runs executing at once",
    )
    TRANSLATION_WORKERS: int = Field(
        default=1,
        description="Concurrent per-segment translation calls (1 = sequential)",
    )
    DOWNLOAD_TIMEOUT_SEC: int = Field(
        default=300,
        description="Socket timeout handed to yt-dlp",
    )
    TRANSCODE_TIMEOUT_SEC: int = Field(
        default=1800,
        description="Maximum seconds a single ffmpeg invocation may run",
    )
    API_TIMEOUT_SEC: int = Field(
        default=120,
        description="Timeout for speech, chat and TTS HTTP calls",
    )

    # OpenAI-compatible speech recognition and chat completion
    OPENAI_API_KEY: str = Field(
        default="",
        description="Fallback key when a request does not carry one",
    )
    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for the Whisper and chat completion endpoints",
    )
    WHISPER_MODEL: str = Field(
        default="whisper-1", description="Speech recognition model"
    )
    CHAT_MODEL: str = Field(
        default="gpt-4o-mini", description="Model used for translation and scripts"
    )
    TRANSLATION_TEMPERATURE: float = Field(default=0.3)
    SCRIPT_TEMPERATURE: float = Field(default=0.7)

    # Languages
    SUBTITLE_SOURCE_LANGUAGE: str = Field(
        default="en", description="Spoken language of videos being subtitled"
    )
    NARRATION_SOURCE_LANGUAGE: str = Field(
        default="ja", description="Spoken language of videos being narrated"
    )
    TARGET_LANGUAGE: str = Field(
        default="Japanese", description="Language subtitles and scripts are written in"
    )
    NARRATION_SCRIPT_CHARS: int = Field(
        default=100, description="Requested length of the narration script"
    )

    # Subtitle rendering
    MIN_SUBTITLE_DURATION_MS: int = Field(
        default=500, description="Minimum on-screen time per subtitle entry"
    )
    SUBTITLE_FORCE_STYLE: str = Field(
        default=DEFAULT_FORCE_STYLE,
        description="ASS force_style applied when burning subtitles",
    )

    # NijiVoice TTS configuration
    NIJIVOICE_API_KEY: str = Field(
        default="",
        description="Fallback speech synthesis key",
        validation_alias=AliasChoices("NIJIVOICE_API_KEY", "TTS_API_KEY"),
    )
    NIJIVOICE_BASE_URL: str = Field(
        default="https://api.nijivoice.com/api/platform/v1",
    )
    NIJIVOICE_VOICE_ACTOR_ID: str = Field(
        default="8c08fd5b-b3eb-4294-b102-a1da00f09c72",
        description="Voice actor used for narration",
    )
    TTS_FORMAT: str = Field(
        default="mp3", description="Audio format requested from the TTS service"
    )
    TTS_SPEAKING_SPEED: float = Field(
        default=1.0,
        description="Speaking speed multiplier",
    )


settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "TMP_DIR",
    "DEFAULT_FORCE_STYLE",
]
