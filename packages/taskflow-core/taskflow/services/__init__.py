"""
Business logic services for Taskflow.
"""

from taskflow.services.employees import EmployeeService
from taskflow.services.stats import StatsService
from taskflow.services.tasks import TaskService
from taskflow.services.timers import TimerEngine

__all__ = [
    "TaskService",
    "TimerEngine",
    "StatsService",
    "EmployeeService",
]
