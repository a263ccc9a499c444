"""
Data models for multifind.

This module contains the core data structures shared by the searcher,
the coordinator and the configuration layer.
"""

from .search_task import SearchTask
from .search_results import Outcome, ResultRecord, TaskExit, TaskState, TaskStatus

__all__ = ['SearchTask', 'Outcome', 'ResultRecord', 'TaskExit', 'TaskState', 'TaskStatus']
