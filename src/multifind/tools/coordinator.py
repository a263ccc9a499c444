"""
Search coordinator for multifind.

The coordinator runs one isolated search task per requested filename and
funnels everything they emit through a single aggregation channel. Lines are
yielded to the caller in arrival order; nothing is sorted. The coordinator
returns only after every task has terminated and the channel is drained.

Channel protocol: every message is an ``(index, payload)`` tuple where
``index`` is the position of the task's filename in the request and
``payload`` is either a ``ResultRecord`` or the task's final ``TaskExit``.
The channel is at end-of-data once every task has delivered its ``TaskExit``
or has been confirmed dead.
"""

import os
import sys
import queue
import threading
import multiprocessing
from multiprocessing.process import BaseProcess
from typing import Iterable, Iterator, List, Optional, Union
import logging

from pydantic import ValidationError

from ..exceptions import ChannelSetupError, ChannelWriteError, UsageError
from ..models.config import LOG_FORMAT, FinderConfig
from ..models.search_results import ResultRecord, TaskExit, TaskId, TaskState, TaskStatus
from ..models.search_task import SearchTask
from .searcher import FileSearcher


logger = logging.getLogger(__name__)

TaskHandle = Union[BaseProcess, threading.Thread]


def _put(channel, message) -> None:
    try:
        channel.put(message)
    except (OSError, ValueError) as e:
        raise ChannelWriteError(f"Cannot write to result channel: {e}") from e


def _execute_task(index: int, task: SearchTask, channel, task_id: TaskId) -> bool:
    """
    Run one search and write its records and exit marker to the channel.

    Returns:
        False if the task failed before delivering its exit marker
    """
    try:
        searcher = FileSearcher(task, lambda record: _put(channel, (index, record)), task_id=task_id)
        found = searcher.search()
        if not found:
            _put(channel, (index, ResultRecord.not_found(task_id, task.filename, task.root)))

        root_error = searcher.root_error.describe() if searcher.root_error else None
        _put(channel, (index, TaskExit(index=index, task_id=task_id, filename=task.filename,
                                       found=found, root_error=root_error)))
    except Exception:
        # The missing exit marker is what tells the coordinator this task died.
        logger.exception(f"Search task for '{task.filename}' failed")
        return False
    return True


def _process_worker(index: int, task: SearchTask, channel, log_level: int) -> None:
    # Spawned children start with an unconfigured root logger; forked ones keep the parent's handlers.
    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)
    if not _execute_task(index, task, channel, os.getpid()):
        sys.exit(1)


def _thread_worker(index: int, task: SearchTask, channel) -> None:
    _execute_task(index, task, channel, threading.get_native_id())


class SearchCoordinator:
    """
    Launch one search task per filename and aggregate their output.

    Each task gets its own copy of the search parameters and shares nothing
    with its siblings except the write side of the channel. Tasks run in
    separate processes by default, or in OS threads when the configuration
    selects the thread executor.

    Attributes:
        config: Executor and timing settings
        statuses: Per-task bookkeeping for the most recently started request.
            Each returned iterator keeps its own list, so an earlier run still
            being drained is not disturbed by a later call to run().
    """

    def __init__(self, config: Optional[FinderConfig] = None):
        self.config = config or FinderConfig()
        self.statuses: List[TaskStatus] = []

    def run(self, root: Union[str, os.PathLike], filenames: Iterable[str],
            recursive: Optional[bool] = None, ignore_case: Optional[bool] = None) -> Iterator[str]:
        """
        Search ``root`` for every filename concurrently.

        The request is validated immediately; the search itself starts when
        the returned iterator is first advanced.

        Args:
            root: Directory to search
            filenames: Names to look for, one task each
            recursive: Descend into subdirectories (config default if None)
            ignore_case: Case-insensitive matching (config default if None)

        Returns:
            Lazy, single-use iterator of newline-terminated output lines

        Raises:
            UsageError: If no filenames are given or the root is empty
        """
        filenames = list(filenames)
        if not filenames:
            raise UsageError("At least one filename must be given")

        if recursive is None:
            recursive = self.config.defaults.recursive
        if ignore_case is None:
            ignore_case = self.config.defaults.ignore_case

        try:
            base = SearchTask(root=os.fspath(root), filename=filenames[0],
                              recursive=recursive, ignore_case=ignore_case)
            tasks = [base.with_filename(name) for name in filenames]
        except ValidationError as e:
            raise UsageError(f"Invalid search request: {e}") from e

        statuses = [TaskStatus(index=i, filename=task.filename) for i, task in enumerate(tasks)]
        self.statuses = statuses
        return self._drain(tasks, statuses)

    def all_roots_failed(self) -> bool:
        """Check whether every task of the last run failed to open the root."""
        return bool(self.statuses) and all(status.root_error for status in self.statuses)

    def _drain(self, tasks: List[SearchTask], statuses: List[TaskStatus]) -> Iterator[str]:
        channel = self._open_channel()
        handles: List[TaskHandle] = []
        try:
            for index, task in enumerate(tasks):
                handles.append(self._spawn(index, task, channel))
                statuses[index].state = TaskState.RUNNING

            yield from self._collect(channel, handles, statuses, tasks[0].root)
        finally:
            self._finish(channel, handles, statuses)

    def _open_channel(self):
        if not self.config.uses_processes():
            return queue.Queue()
        try:
            context = multiprocessing.get_context(self.config.start_method)
            return context.Queue()
        except (OSError, ValueError) as e:
            raise ChannelSetupError(f"Cannot create result channel: {e}") from e

    def _spawn(self, index: int, task: SearchTask, channel) -> TaskHandle:
        if self.config.uses_processes():
            context = multiprocessing.get_context(self.config.start_method)
            handle = context.Process(target=_process_worker,
                                     args=(index, task, channel, logging.getLogger().getEffectiveLevel()),
                                     name=f"multifind-{index}", daemon=True)
        else:
            handle = threading.Thread(target=_thread_worker, args=(index, task, channel),
                                      name=f"multifind-{index}", daemon=True)
        try:
            handle.start()
        except (OSError, RuntimeError) as e:
            raise ChannelSetupError(f"Cannot start search task for '{task.filename}': {e}") from e

        logger.debug(f"Started search task {index} for {task}")
        return handle

    def _collect(self, channel, handles: List[TaskHandle], statuses: List[TaskStatus],
                 root: str) -> Iterator[str]:
        pending = set(range(len(handles)))

        while pending:
            # A task already dead before an empty poll has nothing left in the channel.
            dead = [index for index in pending if not handles[index].is_alive()]
            try:
                index, payload = channel.get(timeout=self.config.poll_interval)
            except queue.Empty:
                for index in dead:
                    pending.discard(index)
                    line = self._mark_abnormal(statuses[index], handles[index], root)
                    if line:
                        yield line
                continue

            status = statuses[index]
            if isinstance(payload, TaskExit):
                status.task_id = payload.task_id
                status.root_error = payload.root_error
                status.state = TaskState.TERMINATED
                pending.discard(index)
            else:
                status.record(payload)
                yield payload.to_line()

    def _mark_abnormal(self, status: TaskStatus, handle: TaskHandle, root: str) -> Optional[str]:
        """Record a task that died without its exit marker; return a NotFound line if it emitted nothing."""
        status.state = TaskState.TERMINATED_ABNORMALLY
        status.exit_code = getattr(handle, 'exitcode', None)
        logger.warning(f"Search task for '{status.filename}' terminated abnormally "
                       f"(exit code {status.exit_code})")

        if status.records:
            return None

        task_id = status.task_id
        if task_id is None:
            task_id = handle.pid if isinstance(handle, BaseProcess) else handle.native_id
        record = ResultRecord.not_found(task_id, status.filename, root)
        status.record(record)
        return record.to_line()

    def _finish(self, channel, handles: List[TaskHandle], statuses: List[TaskStatus]) -> None:
        timeout = self.config.join_timeout
        for index, handle in enumerate(handles):
            status = statuses[index]
            handle.join(timeout)

            if handle.is_alive():
                if isinstance(handle, BaseProcess):
                    logger.error(f"Search task for '{status.filename}' did not exit within {timeout}s, terminating")
                    handle.terminate()
                    handle.join(timeout)
                    if handle.is_alive():
                        handle.kill()
                        handle.join()
                else:
                    logger.error(f"Search task for '{status.filename}' did not exit within {timeout}s, abandoning")
                status.state = TaskState.TERMINATED_ABNORMALLY

            if isinstance(handle, BaseProcess):
                status.exit_code = handle.exitcode

            if not status.is_terminal():
                if status.exit_code in (None, 0):
                    status.state = TaskState.TERMINATED
                else:
                    status.state = TaskState.TERMINATED_ABNORMALLY

        if isinstance(channel, queue.Queue):
            return
        channel.close()
        channel.join_thread()


def run_search(root: Union[str, os.PathLike], filenames: Iterable[str], recursive: bool = False,
               ignore_case: bool = False, config: Optional[FinderConfig] = None) -> Iterator[str]:
    """
    Convenience function to run a concurrent filename search.

    Raises:
        UsageError: If no filenames are given
    """
    return SearchCoordinator(config).run(root, filenames, recursive=recursive, ignore_case=ignore_case)
