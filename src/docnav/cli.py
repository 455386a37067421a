"""CLI interface for Docnav.

Command-line tool for validating and serving documentation navigation.
"""

import logging
from pathlib import Path

import click

from docnav.config import Config
from docnav.core.errors import DocnavError
from docnav.core.sidebar import SidebarCategory, iter_nodes
from docnav.core.site import Site, SiteLoader

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover docnav.toml)",
)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)
def cli(verbose: bool) -> None:
    """Docnav - content registry and sidebar navigation for documentation sites."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _build_site(config: Config) -> Site:
    try:
        return SiteLoader(config).load()
    except DocnavError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@config_option
def check(config_path: Path | None) -> None:
    """Build the site graph and report errors."""
    config = _load_config(config_path)
    site = _build_site(config)

    listed = sum(1 for doc in site.all() if site.sidebar_of(doc.id) is not None)
    click.echo(f"Documents: {len(site.registry)}")
    click.echo(f"Sidebars: {', '.join(site.sidebars) or '(none)'}")
    click.echo(f"Listed in navigation: {listed}")
    unlisted = [doc.id for doc in site.all() if site.sidebar_of(doc.id) is None]
    for doc_id in unlisted:
        click.echo(f"  unlisted: {doc_id}")
    click.echo("OK")


@cli.command()
@config_option
@click.argument("sidebar", required=False)
def tree(config_path: Path | None, sidebar: str | None) -> None:
    """Print sidebar trees (all sidebars when SIDEBAR is omitted)."""
    config = _load_config(config_path)
    site = _build_site(config)

    names = [sidebar] if sidebar else list(site.sidebars)
    for name in names:
        try:
            resolved = site.sidebar(name)
        except DocnavError as e:
            raise click.ClickException(str(e)) from e

        click.echo(name)
        for depth, node in iter_nodes(resolved.items):
            indent = "  " * (depth + 1)
            if isinstance(node, SidebarCategory):
                suffix = f" -> {node.doc_id}" if node.doc_id else ""
                click.echo(f"{indent}[{node.label}]{suffix}")
            else:
                click.echo(f"{indent}{node.label} ({node.doc_id})")


@cli.command()
@config_option
@click.argument("doc_id")
def show(config_path: Path | None, doc_id: str) -> None:
    """Show navigation data for a document."""
    config = _load_config(config_path)
    site = _build_site(config)

    try:
        doc = site.get(doc_id)
        sidebar = site.sidebar_of(doc_id)
    except DocnavError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Title: {doc.title}")
    click.echo(f"Permalink: {doc.permalink}")
    if sidebar is None:
        click.echo("Sidebar: (unlisted)")
        return

    neighbors = site.neighbors_of(doc_id)
    click.echo(f"Sidebar: {sidebar}")
    click.echo(f"Path: {' > '.join(site.path_of(doc_id)) or '(top level)'}")
    click.echo(f"Previous: {neighbors.previous.id if neighbors.previous else '-'}")
    click.echo(f"Next: {neighbors.next.id if neighbors.next else '-'}")


@cli.command()
@config_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
) -> None:
    """Start the navigation query server."""
    from docnav.server import run_server

    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        live_reload_enabled=live_reload,
    )

    loader = SiteLoader(config)
    try:
        loader.load()
    except DocnavError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Metadata file: {config.docs.metadata_file}")
    click.echo(f"Sidebars file: {config.docs.sidebars_file}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config, loader)
