import logging
import sys
from typing import Any, Dict, Mapping, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"

LevelLike = Union[str, int]


class LogWithTqdm(logging.Handler):
    """
    Sends records through `tqdm.write()` on stderr, so log lines printed
    during a batch audit do not tear through the progress bar.
    """
    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level: Optional[LevelLike], default: int) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return getattr(logging, level.strip().upper(), default)
    return default


def configure_logger(
        general_level: LevelLike = 'INFO',
        module_specific_levels: Optional[Mapping[str, LevelLike]] = None,
        silenced_loggers: Optional[Mapping[str, LevelLike]] = None
) -> logging.Logger:
    """
    Installs the tqdm-aware handler on the root logger (replacing any
    existing handlers) and applies per-logger levels.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    # Third-party chatter (urllib3 connection pools, werkzeug request lines)
    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))

    return root_logger


def configure_from_settings(debug_cfg: Dict[str, Any], silenced_loggers: Optional[Mapping[str, LevelLike]] = None):
    """Applies the 'debug' config section: ``level`` plus optional ``modules`` overrides."""
    return configure_logger(
        debug_cfg.get("level", "INFO"),
        module_specific_levels=debug_cfg.get("modules") or None,
        silenced_loggers=silenced_loggers
    )
