"""Custom exceptions for multifind."""

import errno
from enum import Enum


class FinderError(Exception):
    """Base exception for multifind errors."""
    pass


class UsageError(FinderError):
    """Malformed invocation: no filenames or no search root."""
    pass


class ChannelSetupError(FinderError):
    """The aggregation channel or a search task could not be established."""
    pass


class ChannelWriteError(FinderError):
    """A search task could not write a record to the aggregation channel."""
    pass


class DirectoryErrorKind(Enum):
    """Why a directory could not be opened."""
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    OTHER = "other"


class DirectoryOpenError(FinderError):
    """A directory could not be opened during traversal."""

    def __init__(self, path: str, kind: DirectoryErrorKind, reason: str = ""):
        self.path = path
        self.kind = kind
        self.reason = reason
        super().__init__(self.describe())

    @classmethod
    def from_os_error(cls, path: str, exc: OSError) -> 'DirectoryOpenError':
        """Classify an ``OSError`` raised while opening ``path``."""
        if isinstance(exc, PermissionError) or exc.errno == errno.EACCES:
            kind = DirectoryErrorKind.PERMISSION_DENIED
        elif isinstance(exc, FileNotFoundError):
            kind = DirectoryErrorKind.NOT_FOUND
        elif isinstance(exc, NotADirectoryError):
            kind = DirectoryErrorKind.NOT_A_DIRECTORY
        else:
            kind = DirectoryErrorKind.OTHER
        return cls(path, kind, exc.strerror or str(exc))

    def describe(self) -> str:
        if self.kind is DirectoryErrorKind.PERMISSION_DENIED:
            prefix = "Access denied to directory"
        else:
            prefix = "Failed to open directory"
        if self.reason:
            return f"{prefix}: {self.path}: {self.reason}"
        return f"{prefix}: {self.path}"
