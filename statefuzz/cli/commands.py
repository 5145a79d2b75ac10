"""CLI commands for statefuzz."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

import click
from rich.console import Console

from statefuzz.cli.output import ConsoleOutput
from statefuzz.config import StateFuzzSettings, load_settings
from statefuzz.core.models import InvariantTest
from statefuzz.errors import ConfigurationError, SetupFailure, StateFuzzError, SuiteFailure
from statefuzz.generators import domain
from statefuzz.runner import InvariantRunner

EXIT_OK = 0
EXIT_VIOLATION = 1
EXIT_ERROR = 2

# Domain generators that can be sampled without arguments.
SAMPLEABLE_GENERATORS = {
    "weights": domain.weights,
    "weight_bounds": domain.weight_bounds,
    "asset_counts": domain.asset_counts,
    "prices": domain.prices,
    "amounts": domain.amounts,
    "price_histories": domain.price_histories,
    "time_intervals": domain.time_intervals,
    "timestamps": domain.timestamps,
    "slippage_bps": domain.slippage_bps,
    "percentage_bps": domain.percentage_bps,
    "gas_prices": domain.gas_prices,
    "addresses": domain.addresses,
}


RUNNER_LOGGER = "statefuzz.runner"


def setup_logging(verbose: bool, rendered: tuple[str, ...] = ()) -> None:
    """Configure logging based on verbosity level.

    Loggers named in ``rendered`` stay at WARNING because their events are
    already printed by the console output.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    for name in rendered:
        logging.getLogger(name).setLevel(logging.WARNING)


def load_target(target: str) -> ModuleType:
    """Import a test module from a ``.py`` path or a dotted module name."""
    path = Path(target)
    if path.suffix == ".py":
        if not path.exists():
            raise ConfigurationError(f"Test file not found: {target}", field="target", value=target)
        module_name = f"statefuzz_target_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Cannot import {target}", field="target", value=target)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        parent = str(path.resolve().parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)
        spec.loader.exec_module(module)
        return module
    return importlib.import_module(target)


def discover_tests(module: ModuleType) -> list[InvariantTest]:
    """Collect InvariantTests: an ``INVARIANT_TESTS`` list, then module-level instances."""
    tests: list[InvariantTest] = []
    seen: set[int] = set()

    def add(candidate: Any) -> None:
        if isinstance(candidate, InvariantTest) and id(candidate) not in seen:
            seen.add(id(candidate))
            tests.append(candidate)

    for candidate in getattr(module, "INVARIANT_TESTS", None) or []:
        add(candidate)
    for attr_name in dir(module):
        if not attr_name.startswith("_"):
            add(getattr(module, attr_name))
    return tests


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Path to YAML config file")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """statefuzz - property-based invariant testing for stateful systems."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _settings(ctx: click.Context, **overrides: Any) -> StateFuzzSettings:
    try:
        return load_settings(ctx.obj.get("config_path"), **overrides)
    except ConfigurationError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)


def _load_tests(target: str, names: tuple[str, ...]) -> list[InvariantTest]:
    try:
        module = load_target(target)
    except ConfigurationError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)
    except Exception as e:
        logging.exception(f"Failed to import {target}")
        click.echo(f"Failed to import {target}: {e}", err=True)
        sys.exit(EXIT_ERROR)

    tests = discover_tests(module)
    if names:
        by_name = {t.name: t for t in tests}
        missing = [n for n in names if n not in by_name]
        if missing:
            click.echo(f"Test(s) not found: {', '.join(missing)}", err=True)
            sys.exit(EXIT_ERROR)
        tests = [by_name[n] for n in names]
    return tests


@cli.command()
@click.argument("target")
@click.option("--test", "-t", "names", multiple=True, help="Only run the named test (repeatable)")
@click.option("--iterations", "-n", type=int, default=None, help="Iterations per test")
@click.option("--seed", "-s", type=int, default=None, help="Seed to run (or reproduce) with")
@click.option("--verbose", "-v", is_flag=True, help="Show progress and reverted actions")
@click.option("--keep-going", is_flag=True, help="Run every test even after a violation")
@click.option("--workers", "-w", type=int, default=1, show_default=True, help="Run tests on N threads")
@click.pass_context
def run(
    ctx: click.Context,
    target: str,
    names: tuple[str, ...],
    iterations: int | None,
    seed: int | None,
    verbose: bool,
    keep_going: bool,
    workers: int,
) -> None:
    """Run the invariant tests defined in TARGET (a .py file or module)."""
    settings = _settings(ctx)
    try:
        config = settings.run_config(
            iterations=iterations,
            seed=seed,
            verbose=verbose or None,
            stop_on_first_failure=False if keep_going else None,
        )
    except ConfigurationError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)

    setup_logging(config.verbose, rendered=(RUNNER_LOGGER,))

    tests = _load_tests(target, names)
    if not tests:
        click.echo(f"No InvariantTest found in {target}", err=True)
        sys.exit(EXIT_ERROR)

    output = ConsoleOutput(verbose=config.verbose)
    runner = InvariantRunner(config, output=output)
    try:
        runner.run_suite(tests, max_workers=workers)
    except SuiteFailure:
        sys.exit(EXIT_VIOLATION)
    except (SetupFailure, ConfigurationError) as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)
    sys.exit(EXIT_OK)


@cli.command(name="list")
@click.argument("target")
def list_tests(target: str) -> None:
    """List the invariant tests defined in TARGET."""
    tests = _load_tests(target, ())
    if not tests:
        click.echo(f"No InvariantTest found in {target}")
        return
    for test in tests:
        click.echo(
            f"{test.name}  ({len(test.actions)} actions, {len(test.invariants)} invariants)"
        )


@cli.command()
@click.argument("generator", type=click.Choice(sorted(SAMPLEABLE_GENERATORS)))
@click.option("--seed", "-s", type=int, default=0, show_default=True)
@click.option("--count", "-n", type=int, default=5, show_default=True)
def sample(generator: str, seed: int, count: int) -> None:
    """Print COUNT values of a built-in GENERATOR for a seed."""
    console = Console()
    try:
        values = SAMPLEABLE_GENERATORS[generator]().samples(count, seed=seed)
    except StateFuzzError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)
    for value in values:
        console.print(value)
