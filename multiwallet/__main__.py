"""multiwallet package entry point."""

import sys


def run(args):
    """Dispatch `multiwallet <command> [options]` to the named command."""
    from .commands import run_command  # noqa

    command = None
    if len(args) > 1 and args[1] and not args[1].startswith("-"):
        command = args[1]
        args = args[1:]
    run_command(command, args[1:])


def main(args):
    """Execute default entry point."""
    if __name__ == "__main__":
        run(args)


main(sys.argv)
