"""
Taskflow Core Library

Task assignment and time tracking with start/stop timers.
"""

__version__ = "0.1.0"

from taskflow.app import TaskflowApp, create_app
from taskflow.config import TaskflowConfig, load_config

__all__ = [
    "create_app",
    "TaskflowApp",
    "load_config",
    "TaskflowConfig",
]
