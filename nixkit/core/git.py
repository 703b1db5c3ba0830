"""Git preparation and staging for a bootstrap run."""

import subprocess
from collections.abc import Callable
from pathlib import Path

from ..errors import ExecutionError, GitError
from ..models.config import GitSettings
from .executor import Executor
from .report import Reporter

GitQuery = Callable[[list[str], Path], subprocess.CompletedProcess]


def run_git_query(args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    """Run a read-only git command. Never raises on a non-zero exit.

    Raises:
        GitError: If git is not installed
    """
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitError("git is not installed") from e


class GitRepository:
    """A git working tree that nixkit prepares before copying templates.

    Read-only queries always run. Mutating commands go through the executor,
    so a dry run only logs them.
    """

    def __init__(
        self,
        root: Path,
        executor: Executor,
        reporter: Reporter,
        query: GitQuery = run_git_query,
    ) -> None:
        self.root = root
        self.executor = executor
        self.reporter = reporter
        self._query = query

    def _ok(self, *args: str) -> bool:
        return self._query(list(args), self.root).returncode == 0

    def _output(self, *args: str) -> str:
        return self._query(list(args), self.root).stdout.strip()

    def _mutate(self, *args: str) -> str:
        try:
            return self.executor.run(["git", *args], self.root)
        except ExecutionError as e:
            raise GitError(str(e)) from e

    # =========================================================================
    # Queries
    # =========================================================================

    def is_work_tree(self) -> bool:
        return self._output("rev-parse", "--is-inside-work-tree") == "true"

    def is_clean(self) -> bool:
        """True when there are no staged, unstaged or untracked changes."""
        result = self._query(["status", "--porcelain"], self.root)
        if result.returncode != 0:
            raise GitError(f"git status failed: {result.stderr.strip()}")
        return result.stdout.strip() == ""

    def branch_exists(self, name: str) -> bool:
        return self._ok("show-ref", "--verify", "--quiet", f"refs/heads/{name}")

    def has_upstream(self) -> bool:
        return self._ok("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")

    def is_tracked(self, path: str) -> bool:
        return self._ok("ls-files", "--error-unmatch", "--", path)

    def detect_primary_branch(self, candidates: list[str]) -> str:
        """Return the first candidate branch that exists locally.

        Raises:
            GitError: If none of the candidates exists
        """
        for name in candidates:
            if self.branch_exists(name):
                return name
        raise GitError(f"Could not determine primary branch (tried: {', '.join(candidates)})")

    # =========================================================================
    # Preparation
    # =========================================================================

    def check_preconditions(self) -> None:
        """Fail unless the target is a clean git working tree.

        Raises:
            GitError: If the directory is not a repository or has changes
        """
        if not self.is_work_tree():
            raise GitError(f"Not a git repository: {self.root}")
        if not self.is_clean():
            raise GitError("Working tree is not clean; commit or stash your changes first")

    def prepare(self, settings: GitSettings) -> str:
        """Check preconditions, then move onto a fresh working branch.

        Checks out the primary branch, fast-forwards it, creates or resets
        the working branch and commits the removal of the legacy hook
        configuration when it is tracked.

        Args:
            settings: Branch names and the legacy config path

        Returns:
            The detected primary branch

        Raises:
            GitError: If a precondition fails or a git command errors
        """
        self.check_preconditions()
        primary = self.detect_primary_branch(settings.primary_branches)
        self.reporter.info(f"Primary branch: {primary}")

        self._mutate("checkout", primary)

        if self.has_upstream():
            self._mutate("pull", "--ff-only")
            self.reporter.info(f"Updated {primary} (fast-forward only)")
        else:
            self.reporter.warn(f"No upstream configured for {primary}, skipping pull")

        self._mutate("checkout", "-B", settings.work_branch)
        self.reporter.info(f"On working branch: {settings.work_branch}")

        self.remove_legacy_config(settings)
        return primary

    def remove_legacy_config(self, settings: GitSettings) -> bool:
        """Remove the legacy hook configuration if present.

        Returns:
            True if the file was present and removed
        """
        legacy = settings.legacy_hook_config
        if self.is_tracked(legacy):
            self._mutate("rm", "--quiet", "--", legacy)
            self._mutate("commit", "--quiet", "-m", settings.commit_message)
            self.reporter.info(f"Removed legacy {legacy} and committed")
            return True

        path = self.root / legacy
        if self.executor.exists(path):
            self.executor.remove(path)
            self.reporter.info(f"Removed untracked legacy {legacy}")
            return True

        return False

    def ignored_paths(self, paths: list[str]) -> set[str]:
        """Paths among ``paths`` that an ignore rule excludes from ``git add``."""
        if not paths:
            return set()
        result = self._query(["check-ignore", "-z", "--", *paths], self.root)
        # 0: some paths ignored, 1: none ignored
        if result.returncode not in (0, 1):
            raise GitError(f"git check-ignore failed: {result.stderr.strip()}")
        return {path for path in result.stdout.split("\0") if path}

    def stage(self, paths: list[str]) -> bool:
        """Stage the given paths, relative to the repository root.

        Ignored paths are left out with a warning. The files are already in
        place when staging runs, so a failing ``git add`` is reported as a
        warning and the run goes on.

        Returns:
            True if every path that could be staged was staged
        """
        if not paths:
            self.reporter.info("Nothing to stage")
            return True

        try:
            ignored = self.ignored_paths(paths)
            for path in paths:
                if path in ignored:
                    self.reporter.warn(f"Not staging ignored path: {path}")
            to_stage = [path for path in paths if path not in ignored]
            if not to_stage:
                self.reporter.info("Nothing to stage")
                return True
            self._mutate("add", "--", *to_stage)
        except GitError as e:
            self.reporter.warn(f"Staging failed, add the files by hand: {e}")
            return False

        self.reporter.info(f"Staged {len(to_stage)} path(s)")
        return True
