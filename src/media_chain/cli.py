"""Command-line entrypoint for the media chain."""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from .assistant import AgentRunner
from .config import load_config
from .music import MusicClient
from .paths import OutputPaths
from .speech import SpeechClient

app = typer.Typer(add_completion=False, help="Generate speech and music with hosted AI services.")

DEMO_PROMPT = "silly water temple underwater videogame OST"


def setup_logging(log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / "pipeline.log", encoding="utf-8"),
        ],
    )


@app.command()
def music(
    text: str = typer.Argument(DEMO_PROMPT, help="What the track should be about."),
    lyrics: Optional[str] = typer.Option(None, help="Use these lyrics instead of generating them."),
    instrumental: bool = typer.Option(True, "--instrumental/--song", help="Instrumental track or a song."),
    write_file: bool = typer.Option(True, help="Also save the track locally (not implemented yet)."),
    config_path: Optional[str] = typer.Option(None, help="Path to config JSON."),
):
    """Compose a track inspired by TEXT and print its audio URL."""
    typer.clear()
    settings = load_config(config_path)
    paths = OutputPaths.from_settings(settings)
    paths.ensure_all()
    setup_logging(paths.logs_dir)

    kind = "an instrumental OST" if instrumental else "a song"
    typer.secho(f'> Composing {kind} inspired by "{text}"', fg=typer.colors.CYAN)

    async def compose() -> str:
        runner = AgentRunner.from_settings(settings)
        try:
            client = MusicClient.from_settings(settings, runner=runner)
            return await client.text_to_music(text, lyrics=lyrics, instrumental=instrumental, write_file=write_file)
        finally:
            await runner.close()

    url = asyncio.run(compose())
    typer.echo(url)
    typer.secho("> Ready for listening!", fg=typer.colors.BLUE)


@app.command()
def speech(
    text: str = typer.Argument(..., help="Text to speak."),
    voice_id: Optional[str] = typer.Option(None, help="Override the configured voice."),
    similarity_boost: float = typer.Option(0.5),
    stability: float = typer.Option(0.5),
    style: float = typer.Option(0.4),
    speaker_boost: bool = typer.Option(True, "--speaker-boost/--no-speaker-boost"),
    config_path: Optional[str] = typer.Option(None, help="Path to config JSON."),
):
    """Synthesize TEXT to an MP3 file."""
    settings = load_config(config_path)
    paths = OutputPaths.from_settings(settings)
    paths.ensure_all()
    setup_logging(paths.logs_dir)

    client = SpeechClient.from_settings(settings, output_dir=paths.speech_dir)
    path = client.text_to_speech(
        text,
        similarity_boost=similarity_boost,
        stability=stability,
        style=style,
        use_speaker_boost=speaker_boost,
        voice_id=voice_id,
    )
    typer.secho(f"> {path} created", fg=typer.colors.GREEN)


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Question for the assistant."),
    model: str = typer.Option("gpt-4o", help="Chat model."),
    instructions: Optional[str] = typer.Option(None, help="Assistant instructions."),
    thread_id: Optional[str] = typer.Option(None, help="Continue an existing thread."),
    assistant_id: Optional[str] = typer.Option(None, help="Use this assistant."),
    json_reply: bool = typer.Option(False, "--json", help="Ask for a JSON object reply."),
    config_path: Optional[str] = typer.Option(None, help="Path to config JSON."),
):
    """Ask the assistant a question and print the reply and its cost."""
    settings = load_config(config_path)
    paths = OutputPaths.from_settings(settings)
    paths.ensure_all()
    setup_logging(paths.logs_dir)

    async def run_once():
        runner = AgentRunner.from_settings(settings)
        try:
            return await runner.assist(
                model=model,
                prompt=prompt,
                instructions=instructions,
                thread_id=thread_id,
                assistant_id=assistant_id,
                response_format={"type": "json_object"} if json_reply else None,
            )
        finally:
            await runner.close()

    result = asyncio.run(run_once())
    typer.echo(result.reply)
    if result.outputs:
        typer.secho(f"> tool outputs: {json.dumps(result.outputs)}", fg=typer.colors.MAGENTA)
    session = result.session
    typer.secho(
        f"> thread {session.thread_id}: {session.input_tokens} in / {session.output_tokens} out, ${session.cost:.6f}",
        fg=typer.colors.YELLOW,
    )


def main():
    app()


if __name__ == "__main__":
    main()
