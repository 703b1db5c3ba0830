"""Data models for nixkit."""

from .config import (
    Category,
    GitSettings,
    KitConfig,
    Outcome,
    RunConfig,
    SyncResult,
    SyncTask,
    parse_force_spec,
)

__all__ = [
    "Category",
    "GitSettings",
    "KitConfig",
    "Outcome",
    "RunConfig",
    "SyncResult",
    "SyncTask",
    "parse_force_spec",
]
