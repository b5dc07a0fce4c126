"""Command line entry points: serve the API or run a pipeline locally."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from apps.api.media import build_pipeline
from services.pipeline.errors import PipelineError
from services.pipeline.orchestrator import Source, UploadSource, UrlSource
from shared.config import settings
from shared.logging import secret_scope
from shared.types import Mode

app = typer.Typer(add_completion=False, help="Subtitle and narration pipelines")


def _require(value: str, name: str) -> str:
    if not value:
        typer.echo(f"{name} is required (option or environment variable)", err=True)
        raise typer.Exit(code=2)
    return value


@app.command()
def serve(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Run the HTTP API with uvicorn."""
    uvicorn.run("apps.api.main:app", host=host, port=port, reload=reload)


@app.command()
def subtitle(
    video: Optional[Path] = typer.Argument(None, exists=True, dir_okay=False, help="Local video file"),
    url: Optional[str] = typer.Option(None, "--url", help="Remote video URL instead of a file"),
    output: Path = typer.Option(Path("output.mp4"), "--output", "-o"),
    api_key: str = typer.Option("", "--api-key", envvar="OPENAI_API_KEY"),
) -> None:
    """Burn translated subtitles into a video."""
    key = _require(api_key or settings.OPENAI_API_KEY, "OpenAI API key")
    if video is None and not url:
        typer.echo("Provide a video file or --url", err=True)
        raise typer.Exit(code=2)

    with secret_scope(key):
        try:
            if video is not None:
                with open(video, "rb") as fh:
                    result = build_pipeline(key).run(UploadSource(fh, video.name), Mode.SUBTITLE)
            else:
                source: Source = UrlSource(url or "")
                result = build_pipeline(key).run(source, Mode.SUBTITLE)
        except PipelineError as exc:
            typer.echo(f"{exc.kind}: {exc.message}", err=True)
            raise typer.Exit(code=1)
    output.write_bytes(result.content)
    typer.echo(f"Wrote {output}")


@app.command()
def narrate(
    url: str = typer.Argument(..., help="Video URL to summarise"),
    output: Path = typer.Option(Path("podcast.mp3"), "--output", "-o"),
    api_key: str = typer.Option("", "--api-key", envvar="OPENAI_API_KEY"),
    tts_api_key: str = typer.Option("", "--tts-api-key", envvar="NIJIVOICE_API_KEY"),
) -> None:
    """Generate a short narrated summary of a video."""
    key = _require(api_key or settings.OPENAI_API_KEY, "OpenAI API key")
    tts_key = _require(tts_api_key or settings.NIJIVOICE_API_KEY, "NijiVoice API key")

    with secret_scope(key, tts_key):
        try:
            result = build_pipeline(key, tts_key).run(UrlSource(url), Mode.NARRATION)
        except PipelineError as exc:
            typer.echo(f"{exc.kind}: {exc.message}", err=True)
            raise typer.Exit(code=1)
    _, _, encoded = result.data_uri.partition(";base64,")
    output.write_bytes(base64.b64decode(encoded))
    typer.echo(f"Wrote {output} ({result.byte_length} bytes)")


if __name__ == "__main__":  # pragma: no cover
    app()
