import json
import logging
import typer
from typing import Optional
from pathlib import Path
from .config import AppConfig
from .connectors.factory import build_topology
from .checks.database import DatabaseChecks
from .checks.diagnostics import get_diagnostic, list_diagnostics
from .domain.models import HealthStatus
from .exceptions import PgHealthException
from .inspector import ConnectionChecker, InspectorFacade
from .logger import setup_logger

app = typer.Typer(help="PostgreSQL schema health diagnostics")

def _load_config(config: Path, verbose: bool) -> AppConfig:
    setup_logger(logging.DEBUG if verbose else logging.INFO)
    try:
        return AppConfig.from_yaml(config)
    except PgHealthException as e:
        typer.echo(f"Error loading config: {e}", err=True)
        raise typer.Exit(code=1)

@app.command("list-diagnostics")
def list_diagnostics_command():
    """
    Lists every known diagnostic with its staticness and execution topology.
    """
    for diagnostic in sorted(list_diagnostics(), key=lambda d: d.name):
        typer.echo(f"{diagnostic.name}\t{diagnostic.staticness.value}\t{diagnostic.topology.value}")

@app.command()
def check_conn(
    config: Path = typer.Option(..., "--config", "-c", help="Path to configuration file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Connectivity health check for every configured host.
    """
    app_config = _load_config(config, verbose)
    typer.echo(f"Starting connectivity check for {len(app_config.hosts)} hosts...")

    try:
        topology = build_topology(app_config)
    except PgHealthException as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        results = ConnectionChecker(topology).check_health()
    finally:
        topology.close()

    failed = False
    for health in results:
        if health.status == HealthStatus.SUCCESS:
            typer.secho(f"✅ {health.host_name}: Connection Successful ({health.latency_ms}ms)", fg=typer.colors.GREEN)
        elif health.status == HealthStatus.TIMEOUT:
            typer.secho(f"⚠️ {health.host_name}: Slow response ({health.latency_ms}ms)", fg=typer.colors.YELLOW)
        else:
            failed = True
            typer.secho(f"❌ {health.host_name}: Connection Failed. Error: {health.error_message}", fg=typer.colors.RED)

    if failed:
        raise typer.Exit(code=1)

@app.command()
def check(
    diagnostic: str = typer.Argument(..., help="Diagnostic name, see list-diagnostics"),
    config: Path = typer.Option(..., "--config", "-c", help="Path to configuration file"),
    schema: Optional[str] = typer.Option(None, "--schema", "-s", help="Schema to inspect (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Runs one diagnostic against the cluster and prints the findings as JSON.
    """
    app_config = _load_config(config, verbose)

    topology = None
    try:
        selected = get_diagnostic(diagnostic)
        context = app_config.build_context(schema)
        topology = build_topology(app_config)
        checks = DatabaseChecks(topology, max_workers=app_config.max_workers)
        findings = checks.check(selected, context, app_config.exclusions.to_exclusion(context))
    except PgHealthException as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED, err=True)
        if verbose:
            raise
        raise typer.Exit(code=1)
    finally:
        if topology is not None:
            topology.close()

    typer.echo(json.dumps([f.model_dump(mode="json") for f in findings], indent=2))

@app.command()
def report(
    config: Path = typer.Option(..., "--config", "-c", help="Path to configuration file"),
    schema: Optional[str] = typer.Option(None, "--schema", "-s", help="Schema to inspect (overrides config)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Append the summary to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Runs every diagnostic and prints the number of findings of each.
    """
    app_config = _load_config(config, verbose)

    topology = None
    try:
        context = app_config.build_context(schema)
        topology = build_topology(app_config)
        facade = InspectorFacade(
            topology,
            context=context,
            exclusion=app_config.exclusions.to_exclusion(context),
            max_workers=app_config.max_workers,
        )
        inspection = facade.run_diagnostics()
    except PgHealthException as e:
        typer.secho(f"❌ Health report failed: {e}", fg=typer.colors.RED, err=True)
        if verbose:
            raise
        raise typer.Exit(code=1)
    finally:
        if topology is not None:
            topology.close()

    if inspection.summary is None:
        for health in inspection.health:
            if health.status != HealthStatus.SUCCESS:
                typer.secho(f"❌ {health.host_name}: {health.error_message or health.status.value}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    lines = inspection.summary.to_lines()
    for line in lines:
        typer.echo(line)
    if output:
        with open(output, "a") as f:
            f.write("\n".join(lines) + "\n")

    if inspection.summary.total == 0:
        typer.secho("✅ No issues found!", fg=typer.colors.GREEN)

if __name__ == "__main__":
    app()
