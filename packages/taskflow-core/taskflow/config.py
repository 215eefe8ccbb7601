"""
Taskflow Configuration

Loads settings from ~/.taskflow/config.yaml with environment variable overrides.
Supports JSON file, SQLite and in-memory storage.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import os
import logging

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".taskflow"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TICK_SECONDS = 30.0


@dataclass
class StorageConfig:
    """Storage backend settings."""

    type: str = "json"  # "json", "sqlite" or "memory"
    json_path: str = "~/.taskflow/data"
    sqlite_path: str = "~/.taskflow/taskflow.db"


@dataclass
class TimerConfig:
    """Timer accrual settings."""

    tick_seconds: float = DEFAULT_TICK_SECONDS


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class TaskflowConfig:
    """
    Complete Taskflow configuration.

    Loaded from ~/.taskflow/config.yaml with environment variable overrides.
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    timer: TimerConfig = field(default_factory=TimerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Convenience accessors
    @property
    def tick_seconds(self) -> float:
        return self.timer.tick_seconds

    def to_dict(self) -> dict:
        """Convert to dictionary for display."""
        return asdict(self)


def _parse_storage_config(data: dict) -> StorageConfig:
    """Parse storage configuration from YAML data."""
    storage_data = data.get("storage") or {}

    storage_type = storage_data.get("type", "json")

    json_config = storage_data.get("json") or {}
    json_path = json_config.get("path", "~/.taskflow/data")

    sqlite_config = storage_data.get("sqlite") or {}
    sqlite_path = sqlite_config.get("path", "~/.taskflow/taskflow.db")

    return StorageConfig(
        type=storage_type,
        json_path=json_path,
        sqlite_path=sqlite_path,
    )


def _parse_timer_config(data: dict) -> TimerConfig:
    """Parse timer configuration from YAML data."""
    timer_data = data.get("timer") or {}

    tick_seconds = float(timer_data.get("tick_seconds", DEFAULT_TICK_SECONDS))
    if tick_seconds <= 0:
        logger.warning(f"Ignoring non-positive timer.tick_seconds: {tick_seconds}")
        tick_seconds = DEFAULT_TICK_SECONDS

    return TimerConfig(tick_seconds=tick_seconds)


def _parse_logging_config(data: dict) -> LoggingConfig:
    """Parse logging configuration from YAML data."""
    logging_data = data.get("logging") or {}

    return LoggingConfig(
        level=str(logging_data.get("level", "INFO")).upper(),
        file=logging_data.get("file"),
    )


def load_config(config_path: Optional[Path] = None) -> TaskflowConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional path to config file. Defaults to ~/.taskflow/config.yaml

    Returns:
        TaskflowConfig instance
    """
    config_file = config_path or CONFIG_FILE
    config = TaskflowConfig()

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

            config.storage = _parse_storage_config(data)
            config.timer = _parse_timer_config(data)
            config.logging = _parse_logging_config(data)

        except yaml.YAMLError as e:
            logger.warning(f"Could not parse config file at {config_file}: {e}")
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Invalid values in config file at {config_file}: {e}")

    # Environment variable overrides
    if os.environ.get("TASKFLOW_STORAGE_TYPE"):
        config.storage.type = os.environ["TASKFLOW_STORAGE_TYPE"].lower()

    if os.environ.get("TASKFLOW_DATA_DIR"):
        config.storage.json_path = os.environ["TASKFLOW_DATA_DIR"]

    if os.environ.get("TASKFLOW_SQLITE_PATH"):
        config.storage.type = "sqlite"
        config.storage.sqlite_path = os.environ["TASKFLOW_SQLITE_PATH"]

    if os.environ.get("TASKFLOW_TICK_SECONDS"):
        try:
            tick_seconds = float(os.environ["TASKFLOW_TICK_SECONDS"])
        except ValueError:
            logger.warning("Ignoring invalid TASKFLOW_TICK_SECONDS")
        else:
            if tick_seconds > 0:
                config.timer.tick_seconds = tick_seconds

    if os.environ.get("TASKFLOW_LOG_LEVEL"):
        config.logging.level = os.environ["TASKFLOW_LOG_LEVEL"].upper()

    return config


def save_config(config: TaskflowConfig, config_path: Optional[Path] = None) -> None:
    """
    Save configuration to file.

    Args:
        config: TaskflowConfig instance to save
        config_path: Optional path to config file. Defaults to ~/.taskflow/config.yaml
    """
    config_file = config_path or CONFIG_FILE

    # Ensure config directory exists
    config_file.parent.mkdir(parents=True, exist_ok=True)

    # Build YAML structure
    data = {
        "storage": {
            "type": config.storage.type,
        },
        "timer": {
            "tick_seconds": config.timer.tick_seconds,
        },
        "logging": {
            "level": config.logging.level,
        },
    }

    # Add storage-specific config
    if config.storage.type == "json":
        data["storage"]["json"] = {"path": config.storage.json_path}
    elif config.storage.type == "sqlite":
        data["storage"]["sqlite"] = {"path": config.storage.sqlite_path}

    if config.logging.file:
        data["logging"]["file"] = config.logging.file

    # Write file
    with open(config_file, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    # Readable only by owner
    config_file.chmod(0o600)

    logger.info(f"Configuration saved to {config_file}")
