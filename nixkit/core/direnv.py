"""Optional ``direnv allow`` for the bootstrapped repository."""

import shutil
from pathlib import Path

from ..errors import ExecutionError
from .executor import Executor
from .report import Reporter

ENVRC = ".envrc"


def direnv_allow(target_dir: Path, executor: Executor, reporter: Reporter) -> bool:
    """Run ``direnv allow`` when direnv is installed and an .envrc exists.

    A failing ``direnv allow`` is reported as a warning; the run goes on.

    Returns:
        True if direnv was invoked successfully
    """
    if shutil.which("direnv") is None:
        reporter.info("direnv not installed, skipping allow")
        return False

    if not executor.exists(target_dir / ENVRC):
        reporter.info(f"No {ENVRC} in target, skipping direnv allow")
        return False

    try:
        executor.run(["direnv", "allow"], target_dir)
    except ExecutionError as e:
        reporter.warn(f"direnv allow failed: {e}")
        return False

    reporter.info("direnv allowed")
    return True
