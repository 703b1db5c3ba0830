"""Core template synchronization functionality."""

from .audit import find_marked_files
from .direnv import direnv_allow
from .executor import Executor, LocalExecutor, RecordingExecutor
from .git import GitRepository
from .ignore import append_unique_lines
from .operations import TemplateSynchronizer
from .report import Reporter

__all__ = [
    "Executor",
    "GitRepository",
    "LocalExecutor",
    "RecordingExecutor",
    "Reporter",
    "TemplateSynchronizer",
    "append_unique_lines",
    "direnv_allow",
    "find_marked_files",
]
