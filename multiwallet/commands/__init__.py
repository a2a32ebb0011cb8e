"""Command line entry points."""

from importlib import import_module
from os import getenv
from typing import Sequence

PROG = getenv("MULTIWALLET_COMMAND_NAME", "multiwallet")

COMMANDS = {
    "help": "Print available commands",
    "start": "Start the wallet API server",
}


def available_commands():
    """Index available commands."""
    return [{"name": name, "summary": summary} for name, summary in COMMANDS.items()]


def load_command(command: str):
    """Load the module implementing a named command, or None if unknown."""
    if command in COMMANDS:
        return import_module(f"{__package__}.{command}")
    return None


def run_command(command: str, argv: Sequence[str] = None):
    """Execute a named command, falling back to help for unknown names."""
    module = load_command(command) or load_command("help")
    module.execute(argv)
