"""Typer-based command line interface for VRF Guardian."""
from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterator, Optional

import click
import typer

from ..config import AppConfig, config_search_paths, dump_default_config, load_config
from ..exceptions import VrfGuardianError
from ..logging import configure_logging
from ..services.key_lifecycle import KeyLifecycleManager, parse_public_key
from .password import read_password
from .render import render_presenters

app = typer.Typer(help="Manage password-protected VRF keys")

_PASSWORD_FILE = typer.Option(
    None, "--password-file", "-p", help="File whose first line is the key password (prompted otherwise)"
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", metavar="PATH"),
    store_dir: Optional[Path] = typer.Option(None, "--store-dir", help="Override the keystore directory"),
) -> None:
    try:
        app_config = load_config(config)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    if store_dir is not None:
        app_config = app_config.model_copy(update={"store_dir": store_dir.expanduser()})
    ctx.obj = app_config
    configure_logging(app_config.logging.normalized_level())


@contextlib.contextmanager
def _reported() -> Iterator[None]:
    try:
        yield
    except VrfGuardianError as exc:
        typer.echo(f"Error: {exc}", err=True)
        if exc.guidance:
            typer.echo(exc.guidance, err=True)
        raise typer.Exit(code=1) from exc


def _manager() -> KeyLifecycleManager:
    config: AppConfig = click.get_current_context().obj
    return KeyLifecycleManager.from_config(config)


@app.command()
def create(password_file: Optional[Path] = _PASSWORD_FILE) -> None:
    """Create a VRF key in the keystore, protected by a password"""
    with _reported():
        password = read_password(password_file, confirm=True)
        created = _manager().create(password)
    typer.echo(created.guidance())


@app.command("create-weak")
def create_weak(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Destination; must not exist yet"),
    password_file: Optional[Path] = _PASSWORD_FILE,
) -> None:
    """Create a key with weak KDF parameters, written only to FILE. For testing only!"""
    with _reported():
        password = read_password(password_file, confirm=True)
        key_file = _manager().create_and_export_weak(password, file)
    typer.echo("Don't use this key for anything sensitive!")
    typer.echo(f"Wrote {key_file.public_key} -> {file}")


@app.command("import")
def import_key(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Encrypted key file to import"),
    password_file: Optional[Path] = _PASSWORD_FILE,
) -> None:
    """Import an encrypted key file into the keystore"""
    with _reported():
        password = read_password(password_file)
        record = _manager().import_key(password, file)
    typer.echo(f"Imported {record.public_key}")


@app.command("export")
def export_key(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Destination; never overwritten"),
    public_key: Optional[str] = typer.Option(None, "--public-key", "-pk", help="Compressed public key (hex)"),
) -> None:
    """Save an encrypted copy of the key with the given public key to FILE"""
    with _reported():
        key_file = _manager().export_key(public_key, file)
    typer.echo(f"Exported {key_file.public_key} -> {file}")


@app.command()
def delete(
    public_key: Optional[str] = typer.Option(None, "--public-key", "-pk", help="Compressed public key (hex)"),
    hard: bool = typer.Option(False, "--hard", help="Remove the key permanently instead of archiving it"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Archive (or with --hard, purge) a key.

    Running services that already hold the key unlocked keep using it.
    """
    with _reported():
        key = parse_public_key(public_key)
        action = "permanently delete" if hard else "archive"
        confirmed = yes or typer.confirm(f"Really {action} {key}?", default=False)
        if _manager().delete_key(public_key, hard=hard, confirmed=confirmed):
            typer.echo(f"{'Deleted' if hard else 'Archived'} {key}")


@app.command("list")
def list_keys(
    include_archived: bool = typer.Option(False, "--all", "-a", help="Include archived keys"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table"),
) -> None:
    """List the keys in the keystore"""
    with _reported():
        presenters = _manager().list_keys(include_archived=include_archived)
    typer.echo(render_presenters(presenters, as_json=as_json))


@app.command("init-config")
def init_config(
    destination: Optional[Path] = typer.Option(None, "--destination", help="Where to write the config file"),
) -> None:
    """Write the default configuration as YAML"""
    target = destination or list(config_search_paths())[-1]
    if target.exists():
        typer.echo(f"Error: refusing to overwrite existing file {target}", err=True)
        raise typer.Exit(code=1)
    dump_default_config(target)
    typer.echo(f"Configuration written to {target}")


@app.command()
def version() -> None:
    from ..version import __version__

    typer.echo(f"vrf-guardian {__version__}")


if __name__ == "__main__":  # pragma: no cover
    app()
