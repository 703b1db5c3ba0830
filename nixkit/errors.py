"""Exceptions raised by nixkit."""


class NixkitError(Exception):
    """Base error; any NixkitError aborts the run."""


class ConfigError(NixkitError):
    """Invalid arguments, configuration, or a missing template directory."""


class GitError(NixkitError):
    """A git precondition failed or a git command returned an error."""


class ExecutionError(NixkitError):
    """An external command run by the executor failed."""

    def __init__(self, argv: list[str], returncode: int, stderr: str = "") -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Command failed ({returncode}): {' '.join(argv)}{detail}")
