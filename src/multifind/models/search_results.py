"""
Search result data models for multifind.

This module defines the records that search tasks send through the
aggregation channel, the terminal marker each task sends when it is done,
and the per-task status the coordinator keeps while draining.
"""

from typing import Any, Dict, Optional, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator


TaskId = Union[int, str]


class Outcome(Enum):
    """Outcome carried by a result record."""
    FOUND = "found"
    NOT_FOUND = "not_found"


class TaskState(Enum):
    """Lifecycle of a search task as seen by the coordinator."""
    SPAWNED = "spawned"
    RUNNING = "running"
    TERMINATED = "terminated"
    TERMINATED_ABNORMALLY = "terminated_abnormally"


class ResultRecord(BaseModel):
    """
    A single result emitted by one search task.

    Attributes:
        task_id: Identifier of the task that produced the record
        filename: The filename the task was searching for
        root: The search root as supplied by the caller
        outcome: Whether this record reports a match or its absence
        path: Resolved absolute path of the match (FOUND only)
    """

    model_config = ConfigDict(frozen=True)

    task_id: TaskId = Field(..., description="Identifier of the producing task")
    filename: str = Field(..., min_length=1, description="Requested filename")
    root: str = Field(..., min_length=1, description="Search root as supplied")
    outcome: Outcome = Field(..., description="Found or not found")
    path: Optional[str] = Field(None, description="Resolved absolute path of the match")

    @model_validator(mode='after')
    def validate_outcome(self):
        """A FOUND record needs a path and a NOT_FOUND record must not have one."""
        if self.outcome is Outcome.FOUND and not self.path:
            raise ValueError("Found record requires a path")
        if self.outcome is Outcome.NOT_FOUND and self.path is not None:
            raise ValueError("Not-found record cannot carry a path")
        return self

    @classmethod
    def found(cls, task_id: TaskId, filename: str, root: str, path: str) -> 'ResultRecord':
        return cls(task_id=task_id, filename=filename, root=root,
                   outcome=Outcome.FOUND, path=path)

    @classmethod
    def not_found(cls, task_id: TaskId, filename: str, root: str) -> 'ResultRecord':
        return cls(task_id=task_id, filename=filename, root=root,
                   outcome=Outcome.NOT_FOUND)

    def is_found(self) -> bool:
        return self.outcome is Outcome.FOUND

    def to_line(self) -> str:
        """Serialize the record as a newline-terminated output line."""
        if self.is_found():
            return f"{self.task_id}: {self.filename}: {self.path}\n"
        return f"{self.task_id}: {self.filename}: File not found in {self.root}\n"

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary representation."""
        data = self.model_dump()
        data['outcome'] = self.outcome.value
        return data

    def __str__(self) -> str:
        return self.to_line().rstrip("\n")


class TaskExit(BaseModel):
    """
    Terminal marker a task writes after its last result record.

    Attributes:
        index: Position of the task's filename in the request
        task_id: Identifier of the task
        filename: The filename the task searched for
        found: Whether at least one match was emitted
        root_error: Description of the failure to open the root, if any
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    task_id: TaskId
    filename: str
    found: bool
    root_error: Optional[str] = None


class TaskStatus(BaseModel):
    """
    Coordinator-side bookkeeping for one spawned task.

    Attributes:
        index: Position of the task's filename in the request
        filename: The filename the task searches for
        task_id: Identifier reported by the task (None until known)
        state: Current lifecycle state
        records: Number of result records drained for this task
        found: Whether a FOUND record was drained for this task
        root_error: Root-open failure reported by the task
        exit_code: Process exit code, when the executor reports one
    """

    index: int = Field(..., ge=0)
    filename: str
    task_id: Optional[TaskId] = None
    state: TaskState = TaskState.SPAWNED
    records: int = Field(0, ge=0)
    found: bool = False
    root_error: Optional[str] = None
    exit_code: Optional[int] = None

    def is_terminal(self) -> bool:
        return self.state in (TaskState.TERMINATED, TaskState.TERMINATED_ABNORMALLY)

    def record(self, result: ResultRecord) -> None:
        """Account for a drained result record."""
        self.records += 1
        if self.task_id is None:
            self.task_id = result.task_id
        if result.is_found():
            self.found = True

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data['state'] = self.state.value
        return data
