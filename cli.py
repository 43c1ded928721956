"""CLI entrypoint for CLI AI Suggest using Typer."""

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from prompt_toolkit import print_formatted_text

from ai.client import GuardedProvider, build_providers
from core.config import DEFAULT_CONFIG, default_config_path, get_config, save_config
from core.errors import ErrorReporter, ProviderConnectionError
from core.logging import setup_logging
from editor.buffers import BufferManager
from editor.ghost_text import GhostTextRenderer
from editor.ignore import IgnoreRules
from editor.review import build_review_application
from suggest.manager import SuggestionManager
from suggest.models import AcceptOutcome

app = typer.Typer()


@app.callback()
def callback():
    """CLI AI Suggest - AI inline edit suggestions in the terminal."""


def _notify(message: str, level: int) -> None:
    typer.echo(message, err=True)


@app.command()
def suggest(
    path: Path = typer.Argument(..., help="File to suggest edits for"),
    line: int = typer.Option(..., "--line", "-l", help="1-based cursor line"),
    col: Optional[int] = typer.Option(None, "--col", "-c", help="0-based cursor column (defaults to end of line)"),
    accept_all: bool = typer.Option(False, "--accept-all", help="Apply every item of the first suggestion set"),
    write: bool = typer.Option(False, "--write", help="Write accepted suggestions back to the file"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Review suggestions with the configured keys"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file to use"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """Run one suggestion round at a cursor position and show the result."""
    config = get_config(config_path)
    setup_logging("DEBUG" if verbose else config.log_level)

    ignore_rules = IgnoreRules.load(Path.cwd(), config.suggestion_ignored_globs)
    if config.suggestion_respect_ignore and ignore_rules.is_ignored(str(path)):
        typer.echo(f"{path} is ignored, no suggestions")
        raise typer.Exit(1)

    buffers = BufferManager()
    key = buffers.open(path)
    lines = buffers.get_lines(key)
    if not 1 <= line <= len(lines):
        typer.echo(f"Line {line} is outside {path} ({len(lines)} lines)", err=True)
        raise typer.Exit(2)
    buffers.set_cursor(key, (line, len(lines[line - 1]) if col is None else col))
    buffers.start_insert(key)

    try:
        provider = GuardedProvider.from_config(config)
    except ProviderConnectionError as e:
        typer.echo(f"❌ {e} - set API keys or run 'doctor'", err=True)
        raise typer.Exit(1)

    manager = SuggestionManager(
        buffers,
        provider,
        config,
        reporter=ErrorReporter(notify=_notify),
        ignore_rules=ignore_rules
    )

    committed = asyncio.run(manager.suggest(key))
    if config.show_metrics:
        typer.echo(manager.metrics.summary(), err=True)
    if not committed:
        raise typer.Exit(1)

    renderer = GhostTextRenderer()
    sets = manager.ctx(key).sets
    typer.echo(f"{len(sets)} suggestion set(s), showing 1")
    print_formatted_text(renderer.render(buffers.get_lines(key), buffers.get(key).overlay), file=sys.stdout)

    if interactive:
        build_review_application(manager, buffers, key, config).run()
    elif accept_all:
        jumped = False
        while manager.current_set(key):
            outcome = manager.accept(key)
            if outcome is AcceptOutcome.APPLIED:
                jumped = False
            elif outcome is AcceptOutcome.JUMPED and not jumped:
                jumped = True
            else:
                typer.echo(f"⚠️  Stopped accepting: {outcome.value}", err=True)
                break
    else:
        return

    typer.echo("\nAfter accepting:")
    typer.echo(buffers.text(key))
    if write:
        saved = buffers.save(key)
        typer.echo(f"✅ Wrote {saved}")


@app.command("init-config")
def init_config(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file")
):
    """Write the default configuration file."""
    target = path or default_config_path()
    if target.exists() and not force:
        typer.echo(f"⚠️  Config file already exists at {target} (use --force)")
        raise typer.Exit(1)
    saved = save_config(DEFAULT_CONFIG, target)
    typer.echo(f"✅ Wrote default config to {saved}")


@app.command()
def doctor():
    """Diagnose environment and provider setup."""
    config = get_config()

    typer.echo("🔍 CLI AI Suggest Doctor")
    typer.echo("========================")

    available_providers = []
    for name, provider in build_providers(config).items():
        if provider.is_available():
            available_providers.append(name)
            typer.echo(f"✅ {name} is available")
        else:
            hint = "OLLAMA_HOST" if name == "ollama" else provider.api_key_env
            typer.echo(f"❌ {name} unavailable ({hint} not set)")

    config_path = default_config_path()
    if config_path.exists():
        typer.echo(f"✅ Config file found at {config_path}")
    else:
        typer.echo(f"⚠️  Config file not found at {config_path} (using defaults)")

    if config.network_offline:
        typer.echo("⚠️  Offline mode is on, no requests will be sent")
    if not config.suggestion_enabled:
        typer.echo("⚠️  Suggestions are disabled in config")

    if os.path.exists(".gitignore"):
        typer.echo("✅ .gitignore found, ignored files get no suggestions")

    if available_providers:
        typer.echo(f"\nAvailable providers: {', '.join(available_providers)} (configured: {config.provider})")
    else:
        typer.echo("\n❌ No providers available - set API keys")


if __name__ == "__main__":
    app()
