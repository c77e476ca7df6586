"""Logging utilities for GEOConvergence.

Provides structured logging with cycle_id context injection and YAML-based
configuration loading. All loggers are namespaced under 'geoconvergence'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional

import yaml


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Append a file handler writing to this path.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        if log_file:
            file_handler = {
                "class": "logging.FileHandler",
                "filename": log_file,
                "encoding": "utf-8",
            }
            if "standard" in cfg.get("formatters", {}):
                file_handler["formatter"] = "standard"
            cfg.setdefault("handlers", {})["file"] = file_handler
            for logger_cfg in cfg.get("loggers", {}).values():
                logger_cfg.setdefault("handlers", []).append("file")

        if log_level:
            for logger_cfg in cfg.get("loggers", {}).values():
                logger_cfg["level"] = log_level.upper()
            if "root" in cfg:
                cfg["root"]["level"] = log_level.upper()

        logging.config.dictConfig(cfg)
    else:
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            filename=log_file,
        )


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'geoconvergence'.

    Args:
        name: Module or component name (e.g., "engines.geofence_engine").

    Returns:
        Logger instance with full 'geoconvergence.<name>' namespace.
    """
    if name.startswith("geoconvergence"):
        return logging.getLogger(name)
    return logging.getLogger(f"geoconvergence.{name}")


class CycleContextAdapter(logging.LoggerAdapter):
    """Logger adapter that injects cycle_id into all log records.

    Usage:
        logger = get_cycle_logger("pipeline", cycle_id="20240115_120000_a1b2c3")
        logger.info("Evaluating geofences")
        # Output: [INFO] geoconvergence.pipeline: [20240115_120000_a1b2c3] Evaluating geofences
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        cycle_id = self.extra.get("cycle_id", "unknown")
        return f"[{cycle_id}] {msg}", kwargs


def get_cycle_logger(name: str, cycle_id: str) -> CycleContextAdapter:
    """Get a cycle-context-aware logger adapter.

    Args:
        name: Module or component name.
        cycle_id: Cycle identifier (YYYYMMDD_HHMMSS_<suffix>).

    Returns:
        LoggerAdapter that prefixes all messages with [cycle_id].
    """
    return CycleContextAdapter(get_logger(name), {"cycle_id": cycle_id})
