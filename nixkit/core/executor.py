"""Side-effecting operations, performed for real or only recorded.

Decision logic never touches the target directly; it writes and looks up
destinations through an Executor. ``LocalExecutor`` performs each action,
``RecordingExecutor`` logs it and keeps a list of what would have happened,
answering later lookups as if the actions had run.
"""

import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..errors import ExecutionError
from .report import Reporter

# Ignore files are not always valid UTF-8; undecodable bytes round-trip
ENCODING_ERRORS = "surrogateescape"


def read_lines(path: Path) -> list[str]:
    """Read a line list, returning an empty list for a missing file."""
    if not path.is_file():
        return []
    return path.read_text(encoding="utf-8", errors=ENCODING_ERRORS).splitlines()


@dataclass(frozen=True)
class Action:
    """A recorded side effect."""

    kind: str  # "mkdir", "copy", "touch", "append", "remove" or "run"
    args: tuple[str, ...]

    def describe(self) -> str:
        if self.kind == "copy":
            return f"cp {self.args[0]} {self.args[1]}"
        if self.kind == "mkdir":
            return f"mkdir -p {self.args[0]}"
        if self.kind == "touch":
            return f"touch {self.args[0]}"
        if self.kind == "append":
            return f"append {self.args[1]!r} >> {self.args[0]}"
        if self.kind == "remove":
            return f"rm {self.args[0]}"
        return shlex.join(self.args)


class Executor(ABC):
    """Operations that mutate the target repository."""

    @abstractmethod
    def mkdir(self, path: Path) -> None:
        """Create a directory and its parents, if missing."""

    @abstractmethod
    def copy(self, source: Path, destination: Path) -> None:
        """Copy a file byte-for-byte, replacing the destination."""

    @abstractmethod
    def touch(self, path: Path) -> None:
        """Create an empty file if missing."""

    @abstractmethod
    def append_line(self, path: Path, line: str) -> None:
        """Append a line, terminating any unfinished last line first."""

    @abstractmethod
    def remove(self, path: Path) -> None:
        """Delete a file."""

    @abstractmethod
    def run(self, argv: list[str], cwd: Path) -> str:
        """Run a mutating command and return its stdout."""

    def exists(self, path: Path) -> bool:
        """Check a destination, including writes made earlier in the run."""
        return path.exists()

    def read_lines(self, path: Path) -> list[str]:
        """Lines of a destination, including writes made earlier in the run."""
        return read_lines(path)


class LocalExecutor(Executor):
    """Performs every action on the local machine."""

    def mkdir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def copy(self, source: Path, destination: Path) -> None:
        shutil.copyfile(source, destination)
        shutil.copymode(source, destination)

    def touch(self, path: Path) -> None:
        path.touch(exist_ok=True)

    def append_line(self, path: Path, line: str) -> None:
        with open(path, "rb+") as f:
            f.seek(0, 2)
            needs_newline = False
            if f.tell() > 0:
                f.seek(-1, 2)
                needs_newline = f.read(1) != b"\n"
            if needs_newline:
                f.write(b"\n")
            f.write(line.encode("utf-8", ENCODING_ERRORS) + b"\n")

    def remove(self, path: Path) -> None:
        path.unlink()

    def run(self, argv: list[str], cwd: Path) -> str:
        try:
            process = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise ExecutionError(argv, 127, str(e)) from e
        if process.returncode != 0:
            raise ExecutionError(argv, process.returncode, process.stderr)
        return process.stdout


class RecordingExecutor(Executor):
    """Dry-run executor: logs and records actions without performing them.

    Recorded writes are kept in memory on top of the real filesystem, so a
    file "copied" by one stage exists, with the source's lines, for the
    stages after it.
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self.reporter = reporter
        self.actions: list[Action] = []
        self._files: dict[Path, list[str]] = {}
        self._dirs: set[Path] = set()
        self._removed: set[Path] = set()

    def _record(self, kind: str, *args: str) -> None:
        action = Action(kind=kind, args=tuple(args))
        self.actions.append(action)
        if self.reporter is not None:
            self.reporter.action(action.describe())

    def _write(self, path: Path, lines: list[str]) -> None:
        self._removed.discard(path)
        self._files[path] = lines

    def exists(self, path: Path) -> bool:
        if path in self._files or path in self._dirs:
            return True
        if path in self._removed:
            return False
        return path.exists()

    def read_lines(self, path: Path) -> list[str]:
        if path in self._files:
            return list(self._files[path])
        if path in self._removed:
            return []
        return read_lines(path)

    def mkdir(self, path: Path) -> None:
        self._record("mkdir", str(path))
        self._dirs.update([path, *path.parents])

    def copy(self, source: Path, destination: Path) -> None:
        self._record("copy", str(source), str(destination))
        self._write(destination, self.read_lines(source))

    def touch(self, path: Path) -> None:
        self._record("touch", str(path))
        if not self.exists(path):
            self._write(path, [])

    def append_line(self, path: Path, line: str) -> None:
        self._record("append", str(path), line)
        self._write(path, [*self.read_lines(path), line])

    def remove(self, path: Path) -> None:
        self._record("remove", str(path))
        self._files.pop(path, None)
        self._removed.add(path)

    def run(self, argv: list[str], cwd: Path) -> str:
        self._record("run", *argv)
        return ""
