"""Copy engine: files, stub trees, workflow trees and ignore merges."""

import os
from pathlib import Path

from ..models.config import Category, KitConfig, Outcome, RunConfig, SyncResult, SyncTask
from .executor import Executor
from .ignore import append_unique_lines
from .report import Reporter

LABELS = {
    Category.FILES: "File",
    Category.STUBS: "Stub",
    Category.WORKFLOWS: "Workflow",
}


class TemplateSynchronizer:
    """Copies template entries into the target repository.

    The decisions (copy, skip because the destination exists, skip because
    the template is missing) depend on the templates and on the target as
    the executor sees it. Every write and every destination lookup goes
    through the executor, so a dry run takes exactly the same decisions as
    a real one, even when one stage writes a file a later stage touches.
    """

    def __init__(
        self,
        run_config: RunConfig,
        kit: KitConfig,
        executor: Executor,
        reporter: Reporter,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            run_config: Paths and flags for this invocation
            kit: Static lists of what to copy
            executor: Executor performing the writes
            reporter: Output for log lines
        """
        self.run_config = run_config
        self.kit = kit
        self.executor = executor
        self.reporter = reporter

    @property
    def target_dir(self) -> Path:
        return self.run_config.target_dir

    def _source_path(self, task: SyncTask) -> Path:
        return self.run_config.source_root(task.category) / task.source

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.target_dir).as_posix()

    def _copy_one(self, source: Path, destination: Path, category: Category, display: str) -> SyncResult:
        """Copy a single file unless the destination exists and is not forced."""
        label = LABELS[category]
        relative = self._relative(destination)

        if self.executor.exists(destination) and not self.run_config.may_overwrite(category):
            message = f"{label} exists, skipping: {display}"
            self.reporter.warn(message)
            return SyncResult(category, relative, Outcome.SKIPPED_EXISTS, message)

        self.executor.mkdir(destination.parent)
        self.executor.copy(source, destination)
        message = f"{label} copied: {display}"
        self.reporter.info(message)
        return SyncResult(category, relative, Outcome.COPIED, message)

    # =========================================================================
    # Whole files
    # =========================================================================

    def copy_file(self, task: SyncTask) -> SyncResult:
        """Copy one whole-file task, honouring ``source:destination`` renames."""
        source = self._source_path(task)
        destination = self.target_dir / task.destination

        if not source.is_file():
            message = f"Template missing: {task.source}"
            self.reporter.warn(message)
            return SyncResult(task.category, task.destination, Outcome.SKIPPED_MISSING_SOURCE, message)

        display = task.source if task.source == task.destination else f"{task.source} → {task.destination}"
        return self._copy_one(source, destination, task.category, display)

    def copy_files(self) -> list[SyncResult]:
        """Copy every configured whole-file task in order."""
        return [self.copy_file(task) for task in self.kit.file_tasks()]

    # =========================================================================
    # Directory trees (stubs, workflows)
    # =========================================================================

    def merge_tree(self, task: SyncTask) -> list[SyncResult]:
        """Merge a source tree into the target without overwriting unless forced.

        All mirrored directories are created before any file is copied. A
        missing source tree means there is nothing to do.

        Args:
            task: Tree task; ``source`` is a directory under the kit directory
                and ``destination`` a directory under the target

        Returns:
            One SyncResult per file in the source tree
        """
        results: list[SyncResult] = []
        source_root = self._source_path(task)
        destination_root = self.target_dir / task.destination

        if not source_root.is_dir():
            self.reporter.warn(f"{task.source} directory not found")
            return results

        self.reporter.info(f"Processing {task.category.value}")

        directories: list[Path] = []
        files: list[Path] = []
        for root, dirnames, filenames in os.walk(source_root):
            dirnames.sort()
            root_path = Path(root)
            directories.append(root_path.relative_to(source_root))
            files.extend(root_path.relative_to(source_root) / name for name in sorted(filenames))

        for relative_dir in directories:
            self.executor.mkdir(destination_root / relative_dir)

        for relative_file in files:
            results.append(
                self._copy_one(
                    source_root / relative_file,
                    destination_root / relative_file,
                    task.category,
                    relative_file.as_posix(),
                )
            )

        return results

    def copy_stubs(self) -> list[SyncResult]:
        """Merge the stub tree into the target root."""
        return self.merge_tree(self.kit.stub_task())

    def copy_workflows(self) -> list[SyncResult]:
        """Merge workflow definitions into the workflows directory."""
        return self.merge_tree(self.kit.workflow_task())

    # =========================================================================
    # Ignore accumulators
    # =========================================================================

    def merge_ignores(self) -> list[SyncResult]:
        """Append missing rules to every configured ignore file."""
        results: list[SyncResult] = []
        for task in self.kit.ignore_tasks():
            results.extend(
                append_unique_lines(
                    source=self._source_path(task),
                    destination=self.target_dir / task.destination,
                    executor=self.executor,
                    reporter=self.reporter,
                    label=task.destination,
                )
            )
        return results

    def sync_all(self) -> list[SyncResult]:
        """Run every copy stage in order: files, stubs, ignores, workflows."""
        results: list[SyncResult] = []

        self.reporter.step("Copying files")
        results.extend(self.copy_files())

        self.reporter.step("Copying source stubs")
        results.extend(self.copy_stubs())

        self.reporter.step("Merging ignore rules")
        results.extend(self.merge_ignores())

        self.reporter.step("Copying workflows")
        results.extend(self.copy_workflows())

        return results
