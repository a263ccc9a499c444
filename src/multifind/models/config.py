"""
Configuration data models for multifind.

This module defines the settings that control how search tasks are executed:
which executor runs them, how the coordinator polls and joins them, default
matching flags and the diagnostic log level.
"""

from typing import Dict, List, Optional, Any
from enum import Enum
import logging
import multiprocessing
from pydantic import BaseModel, Field, field_validator


class ExecutorKind(Enum):
    """Supported task executors."""
    PROCESS = "process"
    THREAD = "thread"


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

LOG_FORMAT = '%(name)s: %(levelname)s: %(message)s'

KNOWN_CONFIG_KEYS = {'executor', 'start_method', 'poll_interval', 'join_timeout', 'defaults', 'log_level'}


class SearchDefaults(BaseModel):
    """
    Default matching flags applied when the caller does not enable them.

    Attributes:
        recursive: Descend into subdirectories by default
        ignore_case: Compare filenames case-insensitively by default
    """

    recursive: bool = Field(False, description="Descend into subdirectories by default")
    ignore_case: bool = Field(False, description="Case-insensitive comparison by default")


class FinderConfig(BaseModel):
    """
    Main configuration for multifind.

    Attributes:
        executor: Whether tasks run in separate processes or OS threads
        start_method: multiprocessing start method (None for the platform default)
        poll_interval: Seconds to wait on the channel before checking task liveness
        join_timeout: Seconds to wait for each task after the channel is drained
        defaults: Default matching flags
        log_level: Level for diagnostic logging
    """

    executor: ExecutorKind = Field(ExecutorKind.PROCESS, description="Task executor")
    start_method: Optional[str] = Field(None, description="multiprocessing start method")
    poll_interval: float = Field(0.1, gt=0, description="Channel poll interval in seconds")
    join_timeout: float = Field(5.0, gt=0, description="Per-task join timeout in seconds")
    defaults: SearchDefaults = Field(default_factory=SearchDefaults, description="Default matching flags")
    log_level: str = Field("WARNING", description="Diagnostic log level")

    @field_validator('executor', mode='before')
    @classmethod
    def validate_executor(cls, v) -> ExecutorKind:
        """Validate and convert executor to enum."""
        if isinstance(v, str):
            try:
                return ExecutorKind(v.lower())
            except ValueError:
                raise ValueError(f"Invalid executor: {v}")
        return v

    @field_validator('start_method')
    @classmethod
    def validate_start_method(cls, v: Optional[str]) -> Optional[str]:
        """Only start methods known to multiprocessing are accepted."""
        if v is None:
            return v
        if v not in ('fork', 'spawn', 'forkserver'):
            raise ValueError(f"Invalid start method: {v}")
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v) -> str:
        if not isinstance(v, str) or v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    def get_log_level(self) -> int:
        """Get the numeric logging level."""
        return getattr(logging, self.log_level)

    def uses_processes(self) -> bool:
        return self.executor is ExecutorKind.PROCESS

    def validate_configuration(self) -> List[str]:
        """
        Check for settings that are legal but probably unintended.

        The thread executor is a supported choice and is not warned about,
        although a thread that outlives join_timeout can only be abandoned.

        Returns:
            List of warning messages
        """
        warnings = []

        if self.start_method and self.start_method not in multiprocessing.get_all_start_methods():
            warnings.append(f"Start method '{self.start_method}' is not available on this platform")

        if self.start_method and self.executor is ExecutorKind.THREAD:
            warnings.append("start_method has no effect with the thread executor")

        if self.poll_interval > 5:
            warnings.append(f"Long poll interval ({self.poll_interval}s) delays detection of dead tasks")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['executor'] = self.executor.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinderConfig':
        """Create a FinderConfig instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Executor: {self.executor.value}"]
        if self.start_method:
            parts.append(f"Start method: {self.start_method}")
        parts.append(f"Poll: {self.poll_interval}s")
        parts.append(f"Join timeout: {self.join_timeout}s")
        return " | ".join(parts)


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate the top-level structure of a raw configuration dictionary.

    Args:
        config_data: Raw configuration data

    Returns:
        The same data, if valid

    Raises:
        ValueError: If unknown keys are present or a section has the wrong type
    """
    unknown = set(config_data) - KNOWN_CONFIG_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    defaults = config_data.get('defaults')
    if defaults is not None and not isinstance(defaults, dict):
        raise ValueError("'defaults' must be a mapping")

    return config_data
