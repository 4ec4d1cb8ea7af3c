"""Main CLI Module - Command-line interface for pathsuite."""

import json
import os
import sys
import unittest
from pathlib import Path
from typing import Optional, Tuple

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config import ENV_VARS, ConfigError, SuiteConfig
from ..core.errors import InitializationError
from ..core.suite import SuiteConstruction
from ..utils.logging_config import setup_logging

console = Console()

EXIT_TESTS_FAILED = 1
EXIT_CONSTRUCTION_FAILED = 2


def suite_options(func):
    """Options shared by every command that builds a suite."""
    options = [
        click.argument("roots", nargs=-1, type=click.Path(exists=True, file_okay=False)),
        click.option("--config", "-c", "config_file", type=click.Path(exists=True, dir_okay=False),
                     help="YAML configuration file (default: ./pathsuite.yaml if present)"),
        click.option("--name-predicate", help="Import reference of a class name predicate"),
        click.option("--type-predicate", help="Import reference of a test class predicate"),
        click.option("--prefix", "-p", "prefixes", multiple=True,
                     help="Only keep classes in this package (repeatable)"),
        click.option("--exclude-dir", "-x", "exclude_dirs", multiple=True,
                     help="Directory name or pattern to skip (repeatable)"),
        click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"],
                                                      case_sensitive=False), help="Logging level"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_config(
    roots: Tuple[str, ...],
    config_file: Optional[str],
    name_predicate: Optional[str],
    type_predicate: Optional[str],
    prefixes: Tuple[str, ...],
    exclude_dirs: Tuple[str, ...],
    log_level: Optional[str],
) -> SuiteConfig:
    """Combine config file, environment and command-line options.

    Later sources win: file, then environment, then options.
    """
    config = SuiteConfig()
    path = config_file or SuiteConfig.discover(Path.cwd())
    if path:
        config = config.merge(SuiteConfig.from_file(path))
    config = config.merge(SuiteConfig.from_env())
    return config.merge(SuiteConfig(
        roots=[str(Path(r).resolve()) for r in roots],
        exclude_dirs=list(exclude_dirs),
        name_predicate=name_predicate,
        type_predicate=type_predicate,
        prefixes=list(prefixes),
        log_level=log_level,
    ))


def construct(config: SuiteConfig) -> SuiteConstruction:
    """Create a construction for the config, making its roots importable."""
    boundary = config.to_boundary()
    for root in reversed(boundary.roots):
        if str(root) not in sys.path:
            sys.path.insert(0, str(root))
    return SuiteConstruction(config.to_root(), boundary)


def _build(ctx_options: dict) -> Tuple[SuiteConfig, SuiteConstruction]:
    try:
        config = resolve_config(**ctx_options)
        setup_logging(config.log_level)
        construction = construct(config)
        construction.run()
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(EXIT_CONSTRUCTION_FAILED)
    except InitializationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(EXIT_CONSTRUCTION_FAILED)
    return config, construction


@click.group()
@click.version_option(version=__version__, prog_name="pathsuite")
def cli():
    """pathsuite - Build a unittest suite from every test class on your source roots."""
    pass


@cli.command("list")
@suite_options
@click.option("--json", "as_json", is_flag=True, help="Print the construction report as JSON")
def list_tests(as_json: bool, **options):
    """List the test classes that would run.

    ROOTS are source directories to scan (default: current directory).
    """
    _, construction = _build(options)
    report = construction.report

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    table = Table(title=f"Test classes ({len(report.selected)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Class", style="cyan")
    table.add_column("Tests", justify="right")

    for index, (name, child) in enumerate(zip(report.selected, construction.suite), start=1):
        table.add_row(str(index), escape(name), str(child.countTestCases()))

    console.print(table)
    console.print(
        f"Scanned [green]{report.scanned}[/green] classes, "
        f"loaded [green]{report.loaded}[/green], "
        f"selected [green]{len(report.selected)}[/green] "
        f"in {report.duration_ms} ms"
    )
    if report.anomalies:
        console.print(f"[yellow]Skipped {len(report.anomalies)} class(es) with unresolvable members[/yellow]")


@cli.command("run")
@suite_options
@click.option("--verbosity", "-v", type=int, default=1, help="unittest runner verbosity")
@click.option("--failfast", "-f", is_flag=True, help="Stop on the first failure")
def run_tests(verbosity: int, failfast: bool, **options):
    """Discover the test classes and run them with the unittest runner.

    ROOTS are source directories to scan (default: current directory).
    """
    _, construction = _build(options)
    runner = unittest.TextTestRunner(verbosity=verbosity, failfast=failfast)
    result = runner.run(construction.suite)
    if not result.wasSuccessful():
        sys.exit(EXIT_TESTS_FAILED)


@cli.command("config")
@click.option("--config", "-c", "config_file", type=click.Path(exists=True, dir_okay=False),
              help="YAML configuration file")
def show_config(config_file: Optional[str]):
    """Show the effective configuration and environment variables."""
    console.print(Panel.fit("[bold]pathsuite configuration[/bold]", border_style="blue"))

    table = Table(title="Environment Variables")
    table.add_column("Variable", style="cyan")
    table.add_column("Setting")
    table.add_column("Status")

    for var, key in ENV_VARS.items():
        value = os.getenv(var)
        status = f"[green]{escape(value)}[/green]" if value else "[yellow]Not set[/yellow]"
        table.add_row(var, key, status)
    console.print(table)

    try:
        config = resolve_config((), config_file, None, None, (), (), None)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(EXIT_CONSTRUCTION_FAILED)

    console.print("\n[bold]Effective configuration:[/bold]")
    for key, value in config.to_dict().items():
        console.print(f"  {key}: [cyan]{escape(str(value)) if value else '-'}[/cyan]")


def main():
    """Entry point for the CLI."""
    load_dotenv()
    cli(obj={})


if __name__ == "__main__":
    main()
