"""
Logging for the satellite classification system.

Every module logs through ``get_logger(component)``. The console sink shows
all components; ``LogConfig.setup(enable_json=True)`` additionally writes one
JSONL file per component (classification decisions, batch summaries,
session events, ...) plus a plain-text ``application.log``.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger


def _component_filter(component: str):
    return lambda record: record["extra"].get("component") == component


class LogConfig:
    """Centralized logging configuration."""

    LOG_DIR = Path(os.environ.get("SATCLASS_LOG_DIR", "data/logs"))
    LOG_FORMAT = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>{extra[component]: <14}</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    # component -> minimum level written to its JSONL file.
    # Per-sample decisions are DEBUG, so the classification file keeps them.
    COMPONENT_LEVELS: Dict[str, str] = {
        "classification": "DEBUG",
        "batch": "INFO",
        "explain": "INFO",
        "monitoring": "INFO",
        "auth": "INFO",
        "api": "INFO",
    }

    @classmethod
    def setup(
        cls,
        log_level: str = "INFO",
        enable_json: bool = True,
        log_dir: Optional[Path] = None,
    ) -> List[int]:
        """
        (Re)configure all sinks.

        Args:
            log_level: Console and application.log level
            enable_json: Also write per-component JSONL files
            log_dir: Directory for file sinks (defaults to LOG_DIR)

        Returns:
            Loguru sink ids, console first.
        """
        logger.remove()
        logger.configure(extra={"component": "-"})

        sink_ids = [
            logger.add(sys.stderr, format=cls.LOG_FORMAT, level=log_level, colorize=True)
        ]
        if not enable_json:
            return sink_ids

        log_dir = Path(log_dir) if log_dir is not None else cls.LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        for component, level in cls.COMPONENT_LEVELS.items():
            sink_ids.append(logger.add(
                log_dir / f"{component}.jsonl",
                level=level,
                rotation="1 day",
                retention="30 days",
                compression="zip",
                serialize=True,
                filter=_component_filter(component),
            ))

        sink_ids.append(logger.add(
            log_dir / "application.log",
            format=cls.LOG_FORMAT,
            level=log_level,
            rotation="500 MB",
            retention="7 days",
            compression="zip",
        ))

        logger.bind(component="api").info(
            f"File logging enabled in {log_dir} ({len(cls.COMPONENT_LEVELS)} components)"
        )
        return sink_ids

    @classmethod
    def reset(cls):
        """Back to console-only INFO logging."""
        cls.setup(log_level="INFO", enable_json=False)


def get_logger(component: str):
    """
    Logger tagged with a component name.

    Example:
        >>> from satclass.utils.logging_config import get_logger
        >>> logger = get_logger("batch")
        >>> logger.info("CSV processing complete: 118 successful, 2 failed")
    """
    if component not in LogConfig.COMPONENT_LEVELS:
        raise ValueError(
            f"Unknown log component '{component}'; "
            f"expected one of {sorted(LogConfig.COMPONENT_LEVELS)}"
        )
    return logger.bind(component=component)


# Console-only on import; file sinks are opt-in
try:
    LogConfig.reset()
except Exception as e:
    logging.basicConfig(level=logging.INFO)
    logging.warning(f"Failed to initialize loguru logging: {e}")
