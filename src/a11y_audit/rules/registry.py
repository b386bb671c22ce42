# src/a11y_audit/rules/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Callable, Optional, Tuple

from .core import RuleModuleDefinition, RuleSpec

logger = logging.getLogger(__name__)

# Engine name -> package holding that engine's rule implementations
IMPLEMENTATION_PACKAGES: Dict[str, str] = {
    "structured": "a11y_audit.rules.structured",
    "pattern": "a11y_audit.rules.pattern",
}


class RuleRegistry:
    """
    Central registry for rule implementations.

    Dynamically discovers RuleModuleDefinition modules from the per-engine
    implementation packages and indexes them by (engine, rule id), so the
    single shared rule set can be bound to either back-end.
    """

    _implementations: Dict[str, Dict[str, Callable]] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Discovers and registers all rule implementations.

        Scans each package in IMPLEMENTATION_PACKAGES for modules carrying a
        `DEFINITION` attribute (instance of `RuleModuleDefinition`).
        """
        if cls._loaded:
            return

        for engine, package_name in IMPLEMENTATION_PACKAGES.items():
            cls._implementations.setdefault(engine, {})
            try:
                package = importlib.import_module(package_name)
            except ImportError as e:
                logger.error(f"Could not find rule package {package_name}: {e}")
                continue

            for _, name, _ in pkgutil.iter_modules(package.__path__):
                full_name = f"{package_name}.{name}"
                try:
                    module = importlib.import_module(full_name)
                except Exception as e:
                    logger.error(f"Error loading rule module {full_name}: {e}")
                    continue

                defn = getattr(module, "DEFINITION", None)
                if not isinstance(defn, RuleModuleDefinition):
                    continue

                for rule in defn.rules:
                    cls._register_rule(defn.engine, rule)
                logger.debug(f"Rules loaded for {defn.engine}: {', '.join(defn.rule_ids)}")

        cls._loaded = True

    @classmethod
    def _register_rule(cls, engine: str, rule_func: Callable) -> None:
        rule_id = getattr(rule_func, "rule_id", None)
        if not rule_id:
            logger.warning(f"Skipping undecorated rule function {rule_func.__name__}")
            return

        engine_rules = cls._implementations.setdefault(engine, {})
        if rule_id in engine_rules:
            logger.warning(f"Duplicate implementation for {engine}:{rule_id}; keeping the first")
            return
        engine_rules[rule_id] = rule_func

    @classmethod
    def get_rule(cls, engine: str, rule_id: str) -> Optional[Callable]:
        cls.discover()
        return cls._implementations.get(engine, {}).get(rule_id)

    @classmethod
    def bind(cls, engine: str, rule_set: List[RuleSpec]) -> List[Tuple[RuleSpec, Optional[Callable]]]:
        """
        Pairs every rule of the shared rule set with the engine's implementation,
        preserving rule-set order. Missing implementations are paired with None.
        """
        cls.discover()
        return [(spec, cls.get_rule(engine, spec.id)) for spec in rule_set]

    @classmethod
    def implemented_ids(cls, engine: str) -> List[str]:
        cls.discover()
        return sorted(cls._implementations.get(engine, {}))
