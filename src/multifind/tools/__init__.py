"""
Search components for multifind.

The searcher walks a directory tree for a single filename; the coordinator
runs one searcher per filename concurrently and aggregates their output.
"""

from .searcher import FileSearcher, search_for_file
from .coordinator import SearchCoordinator, run_search

__all__ = ['FileSearcher', 'search_for_file', 'SearchCoordinator', 'run_search']
