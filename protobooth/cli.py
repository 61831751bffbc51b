"""CLI entry point for protobooth."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from protobooth.errors import ProtoboothError
from protobooth.fixtures.fixture_manager import FixtureManager
from protobooth.models.config import AUTH_STATES, ROUTER_TYPES, ProtoboothConfig
from protobooth.models.workflow import WORKFLOW_STATES
from protobooth.orchestrator import Orchestrator
from protobooth.storage.file_storage import FileStorage

console = Console()

DEFAULT_CONFIG = "protobooth.config.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_orchestrator(config: str) -> Orchestrator:
    try:
        cfg = ProtoboothConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'protobooth init' to create a default config.")
        sys.exit(1)
    try:
        return Orchestrator(Path(config).resolve().parent, cfg)
    except ProtoboothError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Fixture-driven screenshots and client review workflow"""
    setup_logging(verbose)


@cli.command()
@click.option("--router", "-r", type=click.Choice(ROUTER_TYPES), prompt="Router type", help="Routing convention")
@click.option("--app-url", "-u", default="http://localhost:5173", help="Development server URL")
def init(router: str, app_url: str) -> None:
    """Create a default configuration file."""
    config_path = Path(DEFAULT_CONFIG)
    if config_path.exists():
        if not click.confirm(f"{DEFAULT_CONFIG} already exists. Overwrite?"):
            return

    cfg = ProtoboothConfig(router_type=router, app_url=app_url)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd fixtures for dynamic routes, then run:")
    console.print("  [blue]protobooth capture[/blue]")


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def routes(config: str) -> None:
    """Discover routes and write routes.json."""
    orchestrator = _load_orchestrator(config)
    try:
        manifest = orchestrator.generate_route_manifest()
    except ProtoboothError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title="Discovered Routes")
    table.add_column("Path", style="bold")
    table.add_column("Dynamic")
    table.add_column("Parameters")
    table.add_column("Instances")
    for route in manifest.all_routes():
        instances = orchestrator.fixture_manager.generate_route_instances(route.path)
        table.add_row(
            escape(route.path),
            "yes" if route.is_dynamic else "",
            escape(", ".join(route.parameters)),
            str(len(instances)),
        )
    console.print(table)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--auth-state", "-a", type=click.Choice(AUTH_STATES), default="unauthenticated",
              help="Auth fixture to inject")
@click.option("--global-state", "-g", is_flag=True, help="Inject the global state fixture")
@click.option("--app-url", "-u", default=None, help="Override the configured app URL")
def capture(config: str, auth_state: str, global_state: bool, app_url: str | None) -> None:
    """Capture every route and request a client review."""
    orchestrator = _load_orchestrator(config)
    try:
        result = orchestrator.request_review(auth_state, global_state, app_url)
    except ProtoboothError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    console.print("\n[bold green]Capture Complete[/bold green]")
    table = Table(title="Results Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Routes", str(result.total_routes))
    table.add_row("Screenshots", str(result.total_screenshots))
    table.add_row("Auth fixture", "yes" if result.injected_fixtures.auth else "no")
    table.add_row("Global state", "yes" if result.injected_fixtures.global_state is not None else "no")
    table.add_row("Output", str(orchestrator.output_dir))
    console.print(table)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def status(config: str) -> None:
    """Show the current workflow state."""
    orchestrator = _load_orchestrator(config)
    data = orchestrator.get_workflow_state()
    console.print(f"State: [bold]{data.state}[/bold] (since {data.timestamp})")
    if data.last_capture_result:
        console.print(
            f"Last capture: {data.last_capture_result.screenshot_count} screenshots "
            f"in [blue]{data.last_capture_result.output_path}[/blue]"
        )


@cli.command("set-state")
@click.argument("state", type=click.Choice(WORKFLOW_STATES))
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def set_state(state: str, config: str) -> None:
    """Record a workflow transition."""
    orchestrator = _load_orchestrator(config)
    orchestrator.set_workflow_state(state)
    console.print(f"[green]Workflow state set to {state}[/green]")


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def annotations(config: str) -> None:
    """List client annotations."""
    orchestrator = _load_orchestrator(config)
    items = orchestrator.get_annotations()
    if not items:
        console.print("[yellow]No annotations[/yellow]")
        return
    for i, a in enumerate(items, 1):
        console.print(f"  {i}. [{a.priority}] {a.route} @ {a.viewport}: {a.content} ({a.status})", markup=False)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def reset(config: str) -> None:
    """Return to in-development and clear annotations."""
    orchestrator = _load_orchestrator(config)
    orchestrator.reset_workflow()
    console.print("[green]Workflow reset[/green]")


@cli.group()
def fixtures() -> None:
    """Manage fixture documents."""
    pass


@fixtures.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def fixtures_validate(path: str) -> None:
    """Validate a fixture document."""
    file_path = Path(path).resolve()
    manager = FixtureManager(FileStorage(file_path.parent))
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Failed to parse fixture config: {e}[/red]")
        sys.exit(1)

    outcome = manager.validate_fixture_config(data)
    if not outcome.success:
        console.print("[red]Invalid fixture config:[/red]")
        for err in outcome.errors:
            console.print(f"  - {escape(err)}")
        sys.exit(1)
    console.print(f"[green]Fixture config is valid:[/green] {escape(path)}")


if __name__ == "__main__":
    cli()
