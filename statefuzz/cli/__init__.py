"""statefuzz CLI - Command line interface for statefuzz."""

from statefuzz.cli.commands import cli
from statefuzz.cli.output import ConsoleOutput


def main() -> None:
    """Main entry point for the statefuzz CLI."""
    cli()


__all__ = ["main", "cli", "ConsoleOutput"]
