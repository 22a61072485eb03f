"""
Command-line interface for the remix bank service.

Runs the HTTP API and inspects or writes the playlist manifest, using the
Click framework.
"""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from shared.config import ServiceConfig
from shared.constants import DEFAULT_SERVER_PORT
from shared.errors import RemixBankError
from storage.provider_factory import StorageProviderFactory, connect_store

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load(env_file):
    """Load config and bind the store, exiting with a message if either fails."""
    try:
        config = ServiceConfig.from_env(env_file)
    except RemixBankError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    store = connect_store(config)
    if store is None:
        console.print("[red]Error: no object store configured. Set STORAGE_PROVIDER in .env.[/red]")
        sys.exit(1)
    return config, store


@click.group()
@click.version_option(version="1.0.0")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--env-file', type=click.Path(dir_okay=False), default=None,
              help='Path to .env file (default: ./.env)')
@click.pass_context
def cli(ctx, verbose, env_file):
    """
    🎵 Remix Bank

    Serve paired original/remix tracks from R2, S3 or a local directory.
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file


@cli.command()
@click.option('--host', default='127.0.0.1', help='Interface to bind')
@click.option('--port', default=DEFAULT_SERVER_PORT, help='Port to listen on')
@click.option('--debug/--no-debug', default=False, help='Run in debug mode')
@click.pass_context
def serve(ctx, host, port, debug):
    """Start the HTTP API."""
    from .api import create_app

    try:
        config = ServiceConfig.from_env(ctx.obj['env_file'])
    except RemixBankError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    app = create_app(config)
    if not app.extensions['remixbank']['store']:
        console.print("[yellow]Warning: no object store bound, store endpoints will answer 503[/yellow]")
    else:
        name = StorageProviderFactory.get_provider_name(config.provider)
        console.print(f"Store: [cyan]{name}[/cyan] bucket=[cyan]{config.bucket or config.base_path}[/cyan]")
    console.print(f"[green]Serving on http://{host}:{port}[/green]")
    app.run(host=host, port=port, debug=debug)


@cli.command()
@click.option('--originals', default=None, help='Originals prefix (default from config)')
@click.option('--remixes', default=None, help='Remixes prefix (default from config)')
@click.pass_context
def pairs(ctx, originals, remixes):
    """
    Show how the current store contents pair up.

    Ignores any stored manifest.
    """
    from pairing.engine import pair_keys
    from pairing.rules import DEFAULT_RULES
    from storage.key_lister import list_banks

    config, store = _load(ctx.obj['env_file'])
    originals = originals or config.originals_prefix
    remixes = remixes or config.remixes_prefix

    try:
        original_keys, remix_keys = list_banks(store, originals, remixes)
    except RemixBankError as e:
        console.print(f"[red]❌ Listing failed: {e}[/red]")
        sys.exit(1)

    matched = pair_keys(original_keys, remix_keys, DEFAULT_RULES.with_filler_tokens(config.filler_tokens))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Original", style="green")
    table.add_column("Remix", style="yellow")
    for i, (o, r) in enumerate(matched):
        table.add_row(str(i + 1), o, r)
    console.print(table)

    unpaired = len(original_keys) + len(remix_keys) - 2 * len(matched)
    console.print(f"{len(matched)} pairs, {unpaired} unpaired keys")


@cli.command()
@click.option('--originals', default=None, help='Originals prefix (default from config)')
@click.option('--remixes', default=None, help='Remixes prefix (default from config)')
@click.option('--base-url', default='', help='Public origin used in playback URLs')
@click.option('--commit/--dry-run', default=False, help='Write the manifest to the store')
@click.pass_context
def generate(ctx, originals, remixes, base_url, commit):
    """
    Build playlist.json from the current store contents.

    Prints a preview unless --commit is given.
    """
    from pairing.rules import DEFAULT_RULES
    from playlist.generator import ManifestGenerator

    config, store = _load(ctx.obj['env_file'])
    generator = ManifestGenerator(store, config.manifest_key,
                                  DEFAULT_RULES.with_filler_tokens(config.filler_tokens))
    try:
        outcome = generator.generate(
            originals or config.originals_prefix,
            remixes or config.remixes_prefix,
            base_url=base_url,
            authenticated=True,
            dry_run=not commit,
        )
    except RemixBankError as e:
        console.print(f"[red]❌ Generate failed: {e}[/red]")
        sys.exit(1)

    manifest = outcome.manifest
    console.print(Panel.fit(
        f"originals: [bold]{len(manifest.originals)}[/bold]\n"
        f"remixes:   [bold]{len(manifest.remixes)}[/bold]\n"
        f"pairs:     [bold]{len(manifest.pairs)}[/bold]",
        title="Manifest",
        border_style="cyan"
    ))
    if outcome.wrote:
        console.print(f"[green]✅ Wrote {outcome.bytes} bytes to [cyan]{outcome.key}[/cyan][/green]")
    else:
        console.print_json(manifest.to_json())
        console.print("[yellow]Dry run: nothing written (use --commit)[/yellow]")
