"""CLI entry point for aichat-clone."""

import logging
from datetime import datetime

import click
import uvicorn

from .clone import half_clone
from .errors import CloneError
from .history import HistoryIndex


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool):
    """Clone Claude Code sessions into new, shorter sessions."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command("half-clone")
@click.argument("session_id")
@click.argument("project_path")
def half_clone_command(session_id: str, project_path: str):
    """Copy the later half of SESSION_ID in PROJECT_PATH into a new session."""
    try:
        result = half_clone(session_id, project_path)
    except CloneError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"New session: {result.session_id}")
    click.echo(f"Kept {result.kept} of {result.kept + result.skipped} messages ({result.path})")
    click.echo(f"Resume with: claude --resume {result.session_id}")


@main.command()
@click.option("--project", default=None, help="Only consider sessions of this project path.")
def latest(project: str | None):
    """Show the most recent session in the history index."""
    record = HistoryIndex().latest(project)
    if record is None:
        raise click.ClickException("No sessions in history")

    when = datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
    click.echo(f"{record.session_id}  {when}  {record.project}")
    click.echo(f"  {record.display}")


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
def serve(port: int, host: str):
    """Start the web API."""
    click.echo(f"Starting aichat-clone on http://{host}:{port}")
    uvicorn.run("aichat_clone.server:app", host=host, port=port, reload=False)
