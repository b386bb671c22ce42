import logging
import sys
from typing import List, Optional

from a11y_audit.managers.config_manager import config_manager
from a11y_audit.utils.configure_logging import configure_from_settings
from a11y_shell.command_registry import (
    COMMAND_HELP_TEXTS,
    COMMAND_HIERARCHY,
    CommandRegistry,
    register_all_commands,
)

logger = logging.getLogger(__name__)

SILENCED_LOGGERS = {"urllib3": "WARNING", "werkzeug": "WARNING"}


def print_usage() -> None:
    print("Usage: a11y-audit <command> [options]\n")
    print("Commands:")
    for name in sorted(CommandRegistry):
        subcommands = COMMAND_HIERARCHY.get(name)
        suffix = f" {{{','.join(subcommands)}}}" if subcommands else ""
        print(f"  {name}{suffix}")
    for name in sorted(COMMAND_HELP_TEXTS):
        print(f"\n{COMMAND_HELP_TEXTS[name]}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``a11y-audit`` console script. Returns the exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)

    configure_from_settings(config_manager.get_section("debug"), silenced_loggers=SILENCED_LOGGERS)
    register_all_commands()

    if not argv or argv[0] in ("-h", "--help", "help"):
        print_usage()
        return 0 if argv else 1

    command, args = argv[0], argv[1:]
    handler = CommandRegistry.get(command)
    if handler is None:
        print(f"❌ Unknown command: '{command}'.")
        print_usage()
        return 1

    try:
        return handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
