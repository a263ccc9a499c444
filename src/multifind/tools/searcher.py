"""
Filename searcher for multifind.

This module walks a directory tree looking for regular files with one given
name and emits a result record for every match. Each searcher owns its
traversal state completely; the only thing it shares with other searchers is
the ``emit`` callable it was handed.
"""

import os
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple
import logging

from ..exceptions import DirectoryOpenError
from ..models.search_results import ResultRecord, TaskId
from ..models.search_task import SearchTask


logger = logging.getLogger(__name__)

Emit = Callable[[ResultRecord], None]


class FileSearcher:
    """
    Depth-first searcher for a single filename.

    Traversal uses an explicit stack of directory listings instead of
    recursion, so deep trees cannot exhaust the interpreter's call stack.
    Records are emitted in the same order a recursive walk would produce.
    Every match at every depth is reported.

    Attributes:
        task: The search parameters
        task_id: Identifier stamped on every emitted record
        root_error: Set when the task's own root could not be opened
    """

    def __init__(self, task: SearchTask, emit: Emit, task_id: Optional[TaskId] = None):
        """
        Initialize the searcher.

        Args:
            task: Search parameters (root, filename and flags)
            emit: Callable receiving each Found record
            task_id: Identifier for emitted records (defaults to the process id)
        """
        self.task = task
        self.emit = emit
        self.task_id = task_id if task_id is not None else os.getpid()
        self.root_error: Optional[DirectoryOpenError] = None
        self._stats = {
            'directories_traversed': 0,
            'entries_scanned': 0,
            'files_matched': 0,
            'errors': 0
        }

    def search(self) -> bool:
        """
        Walk the tree under ``task.root`` and emit a record for every match.

        Returns:
            True if at least one match was emitted anywhere in the tree
        """
        try:
            root_entries = self._open_directory(self.task.root)
        except DirectoryOpenError as e:
            self._report_directory_error(e)
            self.root_error = e
            return False

        found = False
        stack: List[Tuple[str, Iterator[os.DirEntry]]] = [(self.task.root, iter(root_entries))]

        while stack:
            _, entries = stack[-1]
            entry = next(entries, None)
            if entry is None:
                stack.pop()
                continue

            self._stats['entries_scanned'] += 1
            is_dir, is_file = self._classify(entry)

            if is_dir:
                if not self.task.recursive:
                    continue
                try:
                    children = self._open_directory(entry.path)
                except DirectoryOpenError as e:
                    self._report_directory_error(e)
                    continue
                stack.append((entry.path, iter(children)))

            elif is_file and self.task.matches(entry.name):
                resolved = self._resolve(entry.path)
                if resolved is None:
                    continue
                self.emit(ResultRecord.found(self.task_id, self.task.filename, self.task.root, resolved))
                self._stats['files_matched'] += 1
                found = True

        return found

    def _open_directory(self, path: str) -> List[os.DirEntry]:
        """
        Read all entries of a directory and close it again.

        Raises:
            DirectoryOpenError: If the directory cannot be opened or read
        """
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            raise DirectoryOpenError.from_os_error(path, e) from e
        self._stats['directories_traversed'] += 1
        return entries

    def _classify(self, entry: os.DirEntry) -> Tuple[bool, bool]:
        """Return (is_dir, is_file) for an entry without following symlinks."""
        try:
            return entry.is_dir(follow_symlinks=False), entry.is_file(follow_symlinks=False)
        except OSError as e:
            logger.debug(f"Cannot stat {entry.path}: {e}")
            return False, False

    def _resolve(self, path: str) -> Optional[str]:
        """Resolve a matched path to an absolute, symlink-free path, or None."""
        try:
            return str(Path(path).resolve(strict=True))
        except (OSError, RuntimeError) as e:
            logger.debug(f"Dropping match {path}, path cannot be resolved: {e}")
            return None

    def _report_directory_error(self, error: DirectoryOpenError) -> None:
        self._stats['errors'] += 1
        logger.warning(error.describe())

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about the traversal."""
        return self._stats.copy()


def search_for_file(root: str, filename: str, emit: Emit, recursive: bool = False,
                    ignore_case: bool = False, task_id: Optional[TaskId] = None) -> bool:
    """
    Search ``root`` for files named ``filename``, emitting a record per match.

    Args:
        root: Directory to search
        filename: Name to look for
        emit: Callable receiving each Found record
        recursive: Descend into subdirectories
        ignore_case: Compare names case-insensitively
        task_id: Identifier for emitted records (defaults to the process id)

    Returns:
        True if at least one match was found
    """
    task = SearchTask(root=root, filename=filename, recursive=recursive, ignore_case=ignore_case)
    return FileSearcher(task, emit, task_id=task_id).search()
