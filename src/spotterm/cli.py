"""
spotterm CLI - entry point.

Runs the terminal UI, or prints the effective keymap with ``spotterm keys``.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from rich.table import Table

from spotterm.command import Command
from spotterm.core import ConfigError, get_console, print_error
from spotterm.keymap import KeymapConfig, load_keymap_config


def print_keymap(keymap_config: KeymapConfig) -> None:
    """Print every bound command with its key sequences."""
    table = Table(title="Key bindings")
    table.add_column("command", style="cyan")
    table.add_column("keys", style="magenta")
    table.add_column("description", style="white")

    for command in Command:
        key_sequences = keymap_config.find_key_sequences(command)
        if key_sequences:
            keys = ", ".join(f'"{k}"' for k in key_sequences)
            table.add_row(command.value, keys, command.description)

    get_console().print(table)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the spotterm command."""
    parser = argparse.ArgumentParser(
        prog="spotterm",
        description="spotterm - Spotify controller for the terminal",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding app.toml, keymap.toml and theme.toml",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")
    subparsers.add_parser("keys", help="Print the effective key bindings")

    args = parser.parse_args(argv)

    try:
        if args.subcommand == "keys":
            print_keymap(load_keymap_config(args.config_dir))
            return 0

        from spotterm.main import run

        return run(args.config_dir)
    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        return 1


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
