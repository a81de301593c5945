"""CLI entry point for urlnotes."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from .bundle import parse_bundle
from .config import load_config
from .exceptions import BundleError, ConfigError, StoreError
from .formatter import format_list
from .models import SCOPES, SaveStatus, Status
from .session import NoteSession
from .urlkey import derive_key
from .utils import backup_filename
from .writer import read_bundle_file, write_export

SCOPE_CHOICE = click.Choice(list(SCOPES))


def _session(ctx: click.Context) -> NoteSession:
    return NoteSession.from_config(ctx.obj["config"])


def _run(coro):
    """Run a coroutine, turning store failures into exit status 1."""
    try:
        return asyncio.run(coro)
    except StoreError as e:
        click.echo(f"Store error: {e}", err=True)
        sys.exit(1)


async def _resolve_scope(session: NoteSession, scope):
    return scope or await session.get_default_scope()


@click.group()
@click.option(
    "--store-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the notes file (default: ./urlnotes.json or URLNOTES_STORE_PATH env var)",
)
@click.option(
    "--backend",
    type=click.Choice(["file", "memory"]),
    default=None,
    help="Storage backend (default: file, or URLNOTES_BACKEND env var)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx, store_path, backend, verbose):
    """Attach notes to web pages by exact URL, path, or origin.

    Example: urlnotes save https://example.com/docs "read later"
    """
    try:
        config = load_config(store_path=store_path, backend=backend, verbose=verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )
        click.echo(f"Store: {config.backend} ({config.store_path})", err=True)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.argument("url")
@click.option("--scope", type=SCOPE_CHOICE, default=None, help="Key scope (default: stored default scope)")
@click.pass_context
def key(ctx, url, scope):
    """Print the storage key derived for URL."""
    if scope is None:
        scope = _run(_session(ctx).get_default_scope())
    derived = derive_key(url, scope)
    click.echo(f"Scope:  {scope}")
    click.echo(f"Key:    {derived.key}")
    click.echo(f"Sample: {derived.sample}")


@main.command()
@click.argument("url")
@click.option("--scope", type=SCOPE_CHOICE, default=None, help="Key scope (default: stored default scope)")
@click.pass_context
def show(ctx, url, scope):
    """Print the note attached to URL."""
    session = _session(ctx)

    async def _show():
        s = await _resolve_scope(session, scope)
        return await session.get_note(s, derive_key(url, s).key)

    note = _run(_show())
    if note is None:
        click.echo("No note for this page.")
        return
    if note.title:
        click.echo(f"# {note.title}")
    click.echo(note.content)


@main.command()
@click.argument("url")
@click.argument("content", required=False)
@click.option("--scope", type=SCOPE_CHOICE, default=None, help="Key scope (default: stored default scope)")
@click.option("--title", type=str, default=None, help="Page title to store with the note")
@click.pass_context
def save(ctx, url, content, scope, title):
    """Save CONTENT as the note for URL.

    Reads the note from stdin when CONTENT is omitted or '-'. Saving blank
    content deletes an existing note.
    """
    if content is None or content == "-":
        content = click.get_text_stream("stdin").read()
    session = _session(ctx)

    async def _save():
        s = await _resolve_scope(session, scope)
        await session.autosave.open(url, title, s)
        session.edit(content)
        return await session.flush()

    outcome = _run(_save())
    if outcome is None:
        click.echo("Nothing to save.", err=True)
        sys.exit(1)
    if outcome.status is SaveStatus.FAILED:
        click.echo(f"Save failed: {outcome.error}", err=True)
        sys.exit(1)
    labels = {
        SaveStatus.SAVED: "Saved",
        SaveStatus.CLEARED: "Cleared",
        SaveStatus.EMPTY: "Empty, nothing saved",
    }
    click.echo(labels[outcome.status])


@main.command()
@click.argument("url")
@click.option("--scope", type=SCOPE_CHOICE, default=None, help="Key scope (default: stored default scope)")
@click.pass_context
def delete(ctx, url, scope):
    """Delete the note attached to URL."""
    session = _session(ctx)

    async def _delete():
        s = await _resolve_scope(session, scope)
        await session.delete_note(s, derive_key(url, s).key)

    _run(_delete())
    click.echo("Deleted")


@main.command(name="list")
@click.argument("query", required=False, default="")
@click.pass_context
def list_notes(ctx, query):
    """List notes, newest first, optionally filtered by QUERY."""
    notes = _run(_session(ctx).refresh_list(query))
    click.echo(format_list(notes))


@main.command()
@click.argument("value", required=False, type=SCOPE_CHOICE)
@click.pass_context
def scope(ctx, value):
    """Print the default scope, or set it to VALUE."""
    session = _session(ctx)
    if value is None:
        click.echo(_run(session.get_default_scope()))
        return
    click.echo(f"Default scope: {_run(session.set_default_scope(value))}")


@main.command(name="export")
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Output file or directory (default: ./url-notes-backup-<timestamp>.json)",
)
@click.pass_context
def export_notes(ctx, output):
    """Export every note to a JSON bundle."""
    bundle = _run(_session(ctx).export_bundle())
    target = Path(output) if output else Path.cwd() / backup_filename()
    try:
        path = write_export(bundle, target)
    except OSError as e:
        click.echo(f"Failed to write export: {e}", err=True)
        sys.exit(1)
    click.echo(f"Exported {len(bundle.notes)} notes to: {path}")


@main.command(name="import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation")
@click.pass_context
def import_notes(ctx, file, yes):
    """Import notes from a JSON bundle. Existing notes with the same key are overwritten."""
    try:
        raw = read_bundle_file(Path(file))
    except OSError as e:
        click.echo(f"Failed to read {file}: {e}", err=True)
        sys.exit(1)

    if not yes:
        try:
            entries = len(parse_bundle(raw)["notes"])
        except BundleError as e:
            click.echo(f"Import failed: {e}", err=True)
            sys.exit(1)
        click.confirm(
            f"Import {entries} notes? Notes with the same key will be overwritten.",
            abort=True,
        )

    result = _run(_session(ctx).import_bundle(raw))
    if result.status is not Status.OK:
        click.echo(f"Import failed: {result.error}", err=True)
        sys.exit(1)
    click.echo(f"Imported {result.count} notes")
    if result.skipped:
        click.echo(f"  ({result.skipped} malformed entries skipped)")
