"""Mini README: Logging helpers shared by the engine, the API and the CLI.

Structure:
    * resolve_level - turn ``"debug"``, ``"WARNING"`` or ``10`` into a level.
    * configure_root_logger - install the ledger handler once, set the level.
    * get_logger - module loggers backed by the ledger handler.

Usage:
    Modules call ``get_logger(__name__)`` at import time, which installs the
    handler at INFO. Entry points then call
    ``configure_root_logger(settings.log_level)`` to apply the configured
    level (``CLUBLEDGER_LOG_LEVEL``). The handler is found by name, so
    server reloads and repeated calls never stack duplicates.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

HANDLER_NAME = "clubledger"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LevelLike = Union[int, str]


def resolve_level(level: LevelLike) -> int:
    """Return the numeric logging level for a name or number."""

    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _ledger_handler(root: logging.Logger) -> Optional[logging.Handler]:
    return next((handler for handler in root.handlers if handler.get_name() == HANDLER_NAME), None)


def configure_root_logger(level: Optional[LevelLike] = None) -> logging.Logger:
    """Install the ledger handler on the root logger and apply ``level``.

    Without a level the root level is only set when the handler is first
    installed, so a level chosen by an entry point is kept.
    """

    root = logging.getLogger()
    if _ledger_handler(root) is None:
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        if level is None:
            level = logging.INFO
    if level is not None:
        root.setLevel(resolve_level(level))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module logger, installing the ledger handler if needed."""

    configure_root_logger()
    return logging.getLogger(name)
