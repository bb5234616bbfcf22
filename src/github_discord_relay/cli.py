from pathlib import Path
from typing import Optional

import typer

from .errors import ConfigError, CursorWriteError
from .sync.cursors import CursorStore
from .utils.logging_utils import get_logger
from .utils.settings import Settings, load_settings

app = typer.Typer(help="GitHub pull-request events → Discord webhook")

ConfigOpt = typer.Option(None, "--config", "-c", help="Legacy JSON config file (interval/repo/webhook).")
EnvFileOpt = typer.Option(Path(".env"), "--env-file", help="dotenv file to read settings from.")


def _settings(config: Optional[Path], env_file: Path) -> Settings:
    try:
        settings = load_settings(config_path=config, env_file=env_file)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    get_logger("relay", settings.LOG_LEVEL)
    return settings


@app.command()
def run(config: Optional[Path] = ConfigOpt, env_file: Path = EnvFileOpt):
    """Poll forever: once now, then every POLL_INTERVAL_MS."""
    from .scheduler import run_forever

    run_forever(_settings(config, env_file))


@app.command()
def sync(config: Optional[Path] = ConfigOpt, env_file: Path = EnvFileOpt):
    """Run a single relay cycle."""
    from .sync.pipeline import run_sync

    report = run_sync(_settings(config, env_file))
    if report is None:
        raise typer.Exit(code=1)
    typer.echo(report.summary())


@app.command()
def cursor(config: Optional[Path] = ConfigOpt, env_file: Path = EnvFileOpt):
    """Show the stored cursor."""
    settings = _settings(config, env_file)
    typer.echo(CursorStore(settings.CURSOR_PATH).read().model_dump_json())


@app.command("reset-cursor")
def reset_cursor(config: Optional[Path] = ConfigOpt, env_file: Path = EnvFileOpt):
    """Forget the last relayed event; the next cycle relays the whole feed."""
    settings = _settings(config, env_file)
    try:
        removed = CursorStore(settings.CURSOR_PATH).reset()
    except CursorWriteError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo("Cursor removed." if removed else "No cursor stored.")


if __name__ == "__main__":
    app()
