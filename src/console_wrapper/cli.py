"""
Console Wrapper CLI - Command-line interface.

Check for, list and install console artifact updates from the terminal.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from console_wrapper.core.config import WrapperConfig, load_config
from console_wrapper.core.exceptions import FetchFailedError, WrapperError, format_exception
from console_wrapper.core.models import ArtifactKind, UpdatePolicy, UpdateState
from console_wrapper.network.context import NetworkContext
from console_wrapper.network.mirrors import MirrorFetcher
from console_wrapper.updater.orchestrator import UpdateOrchestrator
from console_wrapper.updater.storage import ArtifactStore
from console_wrapper.versions.selector import filter_candidates
from console_wrapper.versions.weighting import sort_by_version, weight

app = typer.Typer(
    name="console-wrapper",
    help="Console Wrapper - bootstrap updater for console artifacts",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Keep a console artifact up to date."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _build_config(
    proxy: Optional[str],
    content_dir: Optional[Path],
    auto_detect_proxy: bool,
    attempts: Optional[int],
) -> WrapperConfig:
    config = load_config()
    overrides = {}
    if proxy is not None:
        overrides["proxy"] = proxy
    if content_dir is not None:
        overrides["content_dir"] = content_dir
    if auto_detect_proxy:
        overrides["auto_detect_proxy"] = True
    if attempts is not None:
        overrides["attempts"] = attempts
    return config.model_copy(update=overrides)


def _print_error(error: WrapperError) -> None:
    """Print an error with every failure collected before it."""
    console.print(f"[red]{escape(format_exception(error))}[/red]")
    if isinstance(error, FetchFailedError):
        for index, failure in enumerate(error.failures, start=1):
            console.print(f"  [dim]{index}.[/dim] {escape(format_exception(failure))}")
            if isinstance(failure, FetchFailedError):
                for nested in failure.failures:
                    console.print(f"     [dim]-[/dim] {escape(format_exception(nested))}")


def _orchestrator(
    config: WrapperConfig,
    context: NetworkContext,
    kind: ArtifactKind,
    policy: UpdatePolicy,
) -> UpdateOrchestrator:
    fetcher = MirrorFetcher(
        context,
        mirrors=config.mirrors,
        group=config.group,
        listing_base_url=config.listing_base_url,
    )
    return UpdateOrchestrator(
        kind=kind,
        policy=policy,
        store=ArtifactStore(config.content_dir),
        fetcher=fetcher,
        attempts=config.attempts,
    )


@app.command()
def update(
    kind: ArtifactKind = typer.Option(
        ArtifactKind.PURE, "--kind", "-k", case_sensitive=False, help="Console variant"
    ),
    policy: UpdatePolicy = typer.Option(
        UpdatePolicy.STABLE, "--policy", "-s", case_sensitive=False, help="Update policy"
    ),
    proxy: Optional[str] = typer.Option(None, "--proxy", "-p", help="Proxy URL or DEFAULT"),
    content_dir: Optional[Path] = typer.Option(None, "--content-dir", "-d", help="Artifact directory"),
    auto_detect_proxy: bool = typer.Option(
        False, "--auto-detect-proxy", help="Probe local proxy ports 1080/1088"
    ),
    attempts: Optional[int] = typer.Option(None, "--attempts", "-n", min=1, help="Attempts per request"),
):
    """Install the newest version of a console artifact."""
    try:
        config = _build_config(proxy, content_dir, auto_detect_proxy, attempts)
        console.print(
            Panel.fit(
                f"[bold blue]Console Wrapper[/bold blue]\n"
                f"Kind: {kind.value}\n"
                f"Policy: {policy.value}\n"
                f"Content: {config.content_dir}",
            )
        )
        with NetworkContext.create(config) as context:
            result = _orchestrator(config, context, kind, policy).run()
    except WrapperError as e:
        _print_error(e)
        raise typer.Exit(1)

    if result.updated:
        console.print(
            f"[green]Updated {kind.value}:[/green] "
            f"{result.current_version} -> {result.newest_version}"
        )
        console.print(f"[green]Saved to:[/green] {result.artifact_path}")
    elif UpdateState.UP_TO_DATE in result.history:
        console.print(f"[green]{kind.value} is up to date[/green] ({result.current_version})")


@app.command()
def check(
    kind: ArtifactKind = typer.Option(
        ArtifactKind.PURE, "--kind", "-k", case_sensitive=False, help="Console variant"
    ),
    policy: UpdatePolicy = typer.Option(
        UpdatePolicy.STABLE, "--policy", "-s", case_sensitive=False, help="Update policy"
    ),
    proxy: Optional[str] = typer.Option(None, "--proxy", "-p", help="Proxy URL or DEFAULT"),
    content_dir: Optional[Path] = typer.Option(None, "--content-dir", "-d", help="Artifact directory"),
):
    """Compare the installed version with the newest one, without updating."""
    try:
        config = _build_config(proxy, content_dir, False, None)
        with NetworkContext.create(config) as context:
            orchestrator = _orchestrator(config, context, kind, policy)
            current = orchestrator.store.current_version(kind)
            newest = orchestrator.newest_version()
    except WrapperError as e:
        _print_error(e)
        raise typer.Exit(1)

    table = Table(title=f"{kind.value} ({kind.project_name})")
    table.add_column("Local", style="cyan")
    table.add_column(f"Newest {policy.value}", style="magenta")
    table.add_column("Status")
    status = "[green]up to date[/green]" if current == newest else "[yellow]update available[/yellow]"
    table.add_row(current, newest, status)
    console.print(table)


@app.command()
def versions(
    kind: ArtifactKind = typer.Option(
        ArtifactKind.PURE, "--kind", "-k", case_sensitive=False, help="Console variant"
    ),
    policy: UpdatePolicy = typer.Option(
        UpdatePolicy.EA, "--policy", "-s", case_sensitive=False, help="Update policy"
    ),
    proxy: Optional[str] = typer.Option(None, "--proxy", "-p", help="Proxy URL or DEFAULT"),
    limit: int = typer.Option(20, "--limit", "-l", help="Number of versions to show"),
):
    """List published versions, newest first."""
    try:
        config = _build_config(proxy, None, False, None)
        with NetworkContext.create(config) as context:
            listed = _orchestrator(config, context, kind, policy).list_versions()
    except WrapperError as e:
        _print_error(e)
        raise typer.Exit(1)

    ranked = sort_by_version(filter_candidates(listed, policy))
    if not ranked:
        console.print("[yellow]No versions found[/yellow]")
        return

    table = Table(title=f"{kind.value} Versions ({len(ranked)})")
    table.add_column("Version", style="cyan")
    table.add_column("Weight", justify="right", style="dim")
    for item in ranked[:limit]:
        table.add_row(item, str(weight(item)))
    console.print(table)


@app.command()
def pom(
    version_name: str = typer.Argument(..., metavar="VERSION", help="Artifact version"),
    kind: ArtifactKind = typer.Option(
        ArtifactKind.PURE, "--kind", "-k", case_sensitive=False, help="Console variant"
    ),
    proxy: Optional[str] = typer.Option(None, "--proxy", "-p", help="Proxy URL or DEFAULT"),
):
    """Print the POM of a published version."""
    try:
        config = _build_config(proxy, None, False, None)
        with NetworkContext.create(config) as context:
            fetcher = MirrorFetcher(
                context,
                mirrors=config.mirrors,
                group=config.group,
                listing_base_url=config.listing_base_url,
            )
            text = fetcher.fetch_pom_text(kind.project_name, version_name)
    except WrapperError as e:
        _print_error(e)
        raise typer.Exit(1)

    console.print(text, markup=False, highlight=False)


@app.command()
def version():
    """Show Console Wrapper version."""
    from console_wrapper import __version__

    console.print(f"Console Wrapper v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
