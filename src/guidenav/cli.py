"""CLI interface for Guidenav.

Command-line tool for serving and inspecting guide navigation.
"""

import json
import logging
import sys
from pathlib import Path

import click

from guidenav.config import Config
from guidenav.core.language import FilePreferenceStore, LanguageSelector, UnsupportedLanguage
from guidenav.core.renderer import TreeRenderer, render_html, render_text
from guidenav.core.source import load_toc
from guidenav.core.tree import NavigationTree, TocError, missing_translations
from guidenav.core.types import LanguageCode

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover guidenav.toml)",
)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """Guidenav - multilingual navigation for developer guides."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _load_tree(config: Config, toc_file: Path | None) -> NavigationTree:
    path = toc_file or config.content.toc_file
    try:
        return load_toc(
            path,
            toroot=config.content.toroot,
            default_language=config.languages.default,
            title=config.content.title,
        )
    except FileNotFoundError as e:
        raise click.ClickException(f"TOC file not found: {path}") from e
    except TocError as e:
        raise click.ClickException(f"Invalid TOC file {path}: {e}") from e


@cli.command()
@config_option
@click.option(
    "--toc",
    "toc_file",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="TOC file (overrides config)",
)
@click.option("--host", default=None, help="Host to bind to (overrides config)")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    toc_file: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
) -> None:
    """Start the navigation server."""
    from guidenav.server import run_server

    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        toc_file=toc_file,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"TOC file: {config.content.toc_file}")
    click.echo(f"Languages: {', '.join(config.languages.allowed())}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config)


@cli.command()
@click.argument(
    "toc_file",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    required=False,
)
@config_option
@click.option("--lang", "-l", default=None, help="Display language (default: stored preference)")
@click.option("--active", "-a", default=None, help="URL of the active page")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "html", "json"]),
    default="text",
    help="Output format",
)
@click.option("--expand-all", is_flag=True, help="Expand every section")
@click.option("--toroot", default=None, help="Root-relative path prefix (overrides config)")
def render(
    toc_file: Path | None,
    config_path: Path | None,
    lang: str | None,
    active: str | None,
    output_format: str,
    expand_all: bool,
    toroot: str | None,
) -> None:
    """Render the navigation tree of a TOC file."""
    config = _load_config(config_path).with_overrides(toroot=toroot)
    tree = _load_tree(config, toc_file)

    if lang is None:
        selector = LanguageSelector(
            config.languages.allowed(),
            config.languages.default,
            FilePreferenceStore(config.preferences.state_dir),
        )
        lang = selector.current()

    active_node = tree.mark_active(active)
    if active and active_node is None:
        click.echo(f"Active page not in navigation: {active}", err=True)
    if expand_all:
        tree.expand_all()

    renderer = TreeRenderer(LanguageCode(config.languages.default))
    nodes = renderer.render_tree(tree, lang, active=active_node)

    if output_format == "html":
        click.echo(render_html(nodes))
    elif output_format == "json":
        data = {"language": lang, "items": [node.to_dict() for node in nodes]}
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        click.echo(render_text(nodes))


@cli.command()
@click.argument("language")
@click.argument(
    "toc_file",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    required=False,
)
@config_option
def missing(language: str, toc_file: Path | None, config_path: Path | None) -> None:
    """List entries without a label in LANGUAGE.

    Exits with status 1 when any entry is untranslated.
    """
    config = _load_config(config_path)
    tree = _load_tree(config, toc_file)

    untranslated = missing_translations(tree, language)
    for node in untranslated:
        default_label = node.labels[tree.default_language]
        click.echo(f"{node.url or '(no url)'}\t{default_label}")

    if untranslated:
        click.echo(f"{len(untranslated)} of {len(tree) - 1} entries lack '{language}'", err=True)
        sys.exit(1)
    click.echo(f"All entries have '{language}' labels")


@cli.command()
@click.argument("code", required=False)
@config_option
def language(code: str | None, config_path: Path | None) -> None:
    """Show or set the preferred display language."""
    config = _load_config(config_path)
    selector = LanguageSelector(
        config.languages.allowed(),
        config.languages.default,
        FilePreferenceStore(config.preferences.state_dir),
    )

    if code is None:
        click.echo(selector.current())
        return

    try:
        current = selector.set_current(code)
    except UnsupportedLanguage as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Language set to {current}")


if __name__ == "__main__":
    cli()
