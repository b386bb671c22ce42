# src/a11y_shell/command_registry.py
import importlib
import logging
import pkgutil
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

HANDLER_PACKAGE = "a11y_shell.handlers"

# The central registries, populated dynamically.
CommandRegistry: Dict[str, Callable[..., int]] = {}
COMMAND_HIERARCHY: Dict[str, Any] = {}
COMMAND_HELP_TEXTS: Dict[str, str] = {}


def register_command(name: str, handler: Callable[..., int]) -> None:
    """Adds a command and its handler function to the registry."""
    CommandRegistry[name] = handler
    logger.debug("Registered command '%s'", name)


def discover_handlers():
    """
    Imports every ``*_handler`` module of the handlers package and collects
    its ``handle_<command>`` functions, ``COMMAND_HIERARCHY`` and ``HELP_TEXT``.
    """
    handlers: Dict[str, Callable[..., int]] = {}
    hierarchies: Dict[str, Any] = {}
    help_texts: Dict[str, str] = {}

    package = importlib.import_module(HANDLER_PACKAGE)
    for module_info in pkgutil.iter_modules(package.__path__):
        if not module_info.name.endswith("_handler"):
            continue

        module_name = f"{HANDLER_PACKAGE}.{module_info.name}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.error("Failed to load handler module %s: %s", module_name, e, exc_info=True)
            continue

        for attr_name in dir(module):
            handler_func = getattr(module, attr_name)
            if not attr_name.startswith("handle_") or not callable(handler_func):
                continue
            if getattr(handler_func, "__module__", None) != module.__name__:
                continue

            command_name = attr_name[len("handle_"):]
            handlers[command_name] = handler_func
            hierarchies[command_name] = getattr(module, "COMMAND_HIERARCHY", None)
            help_text = getattr(module, "HELP_TEXT", None)
            if isinstance(help_text, str):
                help_texts[command_name] = help_text.strip()
            logger.debug("Discovered command '%s'", command_name)

    return handlers, hierarchies, help_texts


def register_all_commands() -> None:
    """Discovers all handlers, hierarchies, and help texts, then registers them."""
    discovered_handlers, discovered_hierarchies, discovered_help_texts = discover_handlers()

    for name, handler in discovered_handlers.items():
        if name not in CommandRegistry:
            register_command(name, handler)

    COMMAND_HIERARCHY.update(discovered_hierarchies)
    COMMAND_HELP_TEXTS.update(discovered_help_texts)

    logger.debug("Successfully registered %d handlers.", len(CommandRegistry))
