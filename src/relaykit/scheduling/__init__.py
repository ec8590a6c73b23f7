"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: scheduling/__init__.py.
"""

from .scheduler import TaskScheduler
from .types import Task, TaskResult, TaskStatus, TaskWork

__all__ = ["Task", "TaskResult", "TaskScheduler", "TaskStatus", "TaskWork"]
