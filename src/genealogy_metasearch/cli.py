"""
Command-line interface for genealogy metasearch.

Runs the service, searches the trees from a terminal and manages
the plugin preferences.
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from genealogy_metasearch import __version__
from genealogy_metasearch.config import MetaSearchConfig
from genealogy_metasearch.core.errors import MetaSearchError
from genealogy_metasearch.search.federated import FederatedSearch
from genealogy_metasearch.settings.manager import MetaSearchSettings, Pref, SettingsManager

console = Console()


def async_command(f):
    """Decorator to run async commands."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))
    return wrapper


def _config(ctx: click.Context) -> MetaSearchConfig:
    return ctx.obj["config"]


def _settings(ctx: click.Context) -> SettingsManager:
    return SettingsManager(_config(ctx).preference_store())


def _federated(ctx: click.Context) -> FederatedSearch:
    config = _config(ctx)
    return FederatedSearch(
        config.record_store(),
        _settings(ctx),
        config.search_config(),
    )


@click.group()
@click.version_option(version=__version__, prog_name="metasearch")
@click.option("--catalog", type=click.Path(path_type=Path), help="YAML catalog of the trees")
@click.option("--preferences", type=click.Path(path_type=Path), help="YAML preferences file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, catalog: Optional[Path], preferences: Optional[Path], verbose: bool):
    """
    Metasearch over public family trees.

    Answers the CompGen "Metasuche" and manages its settings.
    """
    config = MetaSearchConfig.from_env()
    if catalog:
        config.catalog_path = catalog
    if preferences:
        config.preferences_path = preferences

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


# =============================================================================
# Service
# =============================================================================

@cli.command("serve")
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", "-p", default=8000, type=int, help="Port")
@click.pass_context
def serve(ctx, host: str, port: int):
    """Run the metasearch web service."""
    from genealogy_metasearch.adapters.metasuche import api
    from genealogy_metasearch.web import main

    api.configure(_federated(ctx))
    console.print(f"[green]Serving metasearch on {host}:{port}[/green]")
    main(host=host, port=port)


# =============================================================================
# Search
# =============================================================================

@cli.command("search")
@click.option("--lastname", "-s", help="Surname")
@click.option("--placename", "-p", help="Fragment of a place name")
@click.option("--placeid", "-g", help="GOV identifier of a place")
@click.option("--since", help="Only records changed after YYYY-MM-DD")
@click.option("--trees", "-t", help="Comma-separated tree names")
@click.option("--key", "-k", help="Access key, if a secret is configured")
@click.option("--json", "as_json", is_flag=True, help="Print the response document")
@click.pass_context
@async_command
async def search(ctx, lastname: Optional[str], placename: Optional[str], placeid: Optional[str],
                 since: Optional[str], trees: Optional[str], key: Optional[str], as_json: bool):
    """Search the trees like the aggregator does."""
    params = {
        "key": key,
        "trees": trees,
        "lastname": lastname,
        "placename": placename,
        "placeid": placeid,
        "since": since,
    }

    try:
        response = await _federated(ctx).search(params)
    except MetaSearchError as e:
        if as_json:
            click.echo(json.dumps(e.to_payload(), ensure_ascii=False))
        else:
            console.print(f"[red]Error ({e.error_class}): {e.message}[/red]")
        sys.exit(1)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(response.to_dict(), ensure_ascii=False, indent=2))
        return

    if response.empty:
        console.print("[yellow]Empty query: give a surname, place name or place id[/yellow]")
        return

    for tree, result in response.hits.items():
        if result.error:
            console.print(f"[red]{tree}: {result.error}[/red]")
            continue

        table = Table(title=f"Tree: {tree}")
        table.add_column("Surname", style="cyan")
        table.add_column("Given name")
        table.add_column("Details")
        table.add_column("Link", style="dim")
        for entry in result.entries:
            table.add_row(entry.lastname, entry.firstname, entry.details, entry.url)
        console.print(table)

        if not result.entries:
            console.print("[yellow]No matches found[/yellow]")
        elif result.more:
            console.print(f"[yellow]More than {len(result.entries)} matches; list truncated[/yellow]")


@cli.command("trees")
@click.pass_context
@async_command
async def trees(ctx):
    """List the trees of the catalog and whether they are searchable."""
    try:
        search_service = _federated(ctx)
        collections = await search_service.store.list_collections()
        public = set(await search_service.trees())
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Trees")
    table.add_column("Name", style="cyan")
    table.add_column("Title")
    table.add_column("Order", justify="right")
    table.add_column("Searchable")
    for c in collections:
        if c.name in public:
            status = "[green]yes[/green]"
        elif not c.enabled:
            status = "no (disabled)"
        elif not c.public:
            status = "no (private)"
        else:
            status = "no (excluded)"
        table.add_row(c.name, c.display_title(), str(c.sort_order), status)
    console.print(table)


# =============================================================================
# Settings
# =============================================================================

@cli.group()
def settings():
    """Plugin preference commands."""
    pass


def _describe_secret(snapshot: MetaSearchSettings) -> str:
    if not snapshot.secret_configured:
        return "not set (open access)"
    return "set (hashed)" if snapshot.use_hash else "set"


@settings.command("show")
@click.pass_context
def settings_show(ctx):
    """Show the current preferences."""
    snapshot = _settings(ctx).snapshot()

    table = Table(title="MetaSearch preferences")
    table.add_column("Preference", style="cyan")
    table.add_column("Value")
    table.add_row(Pref.SECRET_KEY, _describe_secret(snapshot))
    table.add_row(Pref.USE_HASH, "yes" if snapshot.use_hash else "no")
    table.add_row(Pref.MAX_HIT, str(snapshot.max_hit))
    table.add_row(Pref.SURNAME_MATCH, snapshot.surname_match.value)
    table.add_row(Pref.DEFAULT_TREES, ", ".join(snapshot.default_trees) or "(all public)")
    table.add_row(Pref.TREE_ORDER, ", ".join(snapshot.tree_order) or "(catalog order)")
    table.add_row(Pref.DISABLED_TREES, ", ".join(snapshot.disabled_trees) or "(none)")
    table.add_row(Pref.DATABASE_NAME, snapshot.database_name)
    table.add_row(Pref.DATABASE_URL, snapshot.database_url)
    console.print(table)


@settings.command("secret")
@click.option("--secret", prompt="New secret key (blank keeps the current one)",
              hide_input=True, default="", show_default=False, help="New secret key")
@click.option("--hash/--no-hash", "use_hash", default=False, help="Store the secret as a bcrypt hash")
@click.pass_context
def settings_secret(ctx, secret: str, use_hash: bool):
    """Set the secret key and hash mode."""
    manager = _settings(ctx)
    try:
        manager.update_secret(secret, use_hash)
    except MetaSearchError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)
    console.print(f"[green]Secret key: {_describe_secret(manager.snapshot())}[/green]")


_SETTERS = {
    Pref.MAX_HIT: lambda m, v: m.set_max_hit(int(v)),
    Pref.SURNAME_MATCH: lambda m, v: m.set_surname_match(v),
    Pref.DEFAULT_TREES: lambda m, v: m.set_default_trees(v),
    Pref.TREE_ORDER: lambda m, v: m.set_tree_order(v),
    Pref.DISABLED_TREES: lambda m, v: m.set_disabled_trees(v),
    Pref.DATABASE_NAME: lambda m, v: m.set_database(name=v),
    Pref.DATABASE_URL: lambda m, v: m.set_database(url=v),
}


@settings.command("set")
@click.argument("name", type=click.Choice(sorted(_SETTERS)))
@click.argument("value")
@click.pass_context
def settings_set(ctx, name: str, value: str):
    """Set a preference (tree lists are comma-separated)."""
    manager = _settings(ctx)
    try:
        _SETTERS[name](manager, value)
    except ValueError:
        console.print(f"[red]Error: {name} must be a number: {value}[/red]")
        sys.exit(1)
    except MetaSearchError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)
    console.print(f"[green]{name} updated[/green]")


# =============================================================================
# Version
# =============================================================================

@cli.command("version")
@click.option("--check", is_flag=True, help="Look up the latest release")
@async_command
async def version(check: bool):
    """Show the version, optionally with the latest release."""
    console.print(f"metasearch {__version__}")
    if not check:
        return

    from genealogy_metasearch.version import LatestVersionChecker

    checker = LatestVersionChecker()
    latest = await checker.latest_version()
    if await checker.update_available():
        console.print(f"[yellow]Version {latest} is available[/yellow]")
    else:
        console.print(f"[green]Up to date (latest release {latest})[/green]")


def main():
    """Entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
