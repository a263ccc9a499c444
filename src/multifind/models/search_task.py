"""
Search task data model for multifind.

A search task is the immutable input handed to one concurrent searcher: the
root to search, the filename to look for, and the matching flags.
"""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchTask(BaseModel):
    """
    Immutable parameters for a single filename search.

    One task is created per requested filename. Tasks are frozen so that a
    copy handed to a worker can never be changed by the coordinator or by a
    sibling worker.

    Attributes:
        root: Directory to search, exactly as supplied by the caller
        filename: Name of the file to look for
        recursive: Whether to descend into subdirectories
        ignore_case: Whether to compare names case-insensitively
    """

    model_config = ConfigDict(frozen=True)

    root: str = Field(..., min_length=1, description="Directory to search")
    filename: str = Field(..., min_length=1, description="Name of the file to look for")
    recursive: bool = Field(False, description="Descend into subdirectories")
    ignore_case: bool = Field(False, description="Case-insensitive name comparison")

    @field_validator('root')
    @classmethod
    def validate_root(cls, v: str) -> str:
        """Reject blank roots but keep the caller's spelling."""
        if not v.strip():
            raise ValueError("Search root cannot be empty")
        return v

    @field_validator('filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Reject blank filenames."""
        if not v.strip():
            raise ValueError("Filename cannot be empty")
        return v

    def matches(self, name: str) -> bool:
        """Check whether a directory entry name matches this task's filename."""
        if self.ignore_case:
            return name.casefold() == self.filename.casefold()
        return name == self.filename

    def with_filename(self, filename: str) -> 'SearchTask':
        """Return a fresh task with the same root and flags for another filename."""
        return self.model_validate({**self.model_dump(), 'filename': filename})

    def to_dict(self) -> Dict[str, Any]:
        """Convert the task to a dictionary representation."""
        return self.model_dump()

    def __str__(self) -> str:
        flags = []
        if self.recursive:
            flags.append("recursive")
        if self.ignore_case:
            flags.append("ignore-case")
        suffix = f" ({', '.join(flags)})" if flags else ""
        return f"'{self.filename}' in {self.root}{suffix}"
