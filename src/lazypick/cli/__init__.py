"""lazypick CLI - Command line interface for lazypick."""

from lazypick.cli.commands import cli


def main() -> None:
    """Main entry point for the lazypick CLI."""
    cli()


__all__ = ["main", "cli"]
