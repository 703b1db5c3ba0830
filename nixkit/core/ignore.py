"""Deduplicating line merger for ignore-style accumulator files."""

from pathlib import Path

from ..models.config import Category, Outcome, SyncResult
from .executor import ENCODING_ERRORS, Executor, read_lines
from .report import Reporter


def printable(line: str) -> str:
    """Line as shown on the console; undecodable bytes become U+FFFD."""
    return line.encode("utf-8", ENCODING_ERRORS).decode("utf-8", "replace")


def append_unique_lines(
    source: Path,
    destination: Path,
    executor: Executor,
    reporter: Reporter,
    label: str | None = None,
) -> list[SyncResult]:
    """Append every source line that the destination does not already hold.

    Lines are compared verbatim against whole destination lines. Empty
    source lines are ignored. A line appended earlier in the same call
    counts as present, so repeated source lines are written once and a
    dry run reports the same outcomes as a real run.

    Args:
        source: File with candidate lines, one per line
        destination: Accumulator file (e.g. .gitignore); created when missing
        executor: Executor performing the writes
        reporter: Output for per-line log messages
        label: Destination path used in results (defaults to its name)

    Returns:
        One SyncResult per non-empty source line
    """
    results: list[SyncResult] = []
    if not source.is_file():
        return results

    label = label or destination.name
    if not executor.exists(destination):
        executor.touch(destination)

    present = set(executor.read_lines(destination))

    for line in read_lines(source):
        if not line:
            continue

        if line in present:
            message = f"Ignore rule already present in {label}: {printable(line)}"
            reporter.warn(message)
            results.append(SyncResult(Category.IGNORE, label, Outcome.ALREADY_PRESENT, message))
            continue

        executor.append_line(destination, line)
        present.add(line)
        message = f"Ignore rule added to {label}: {printable(line)}"
        reporter.info(message)
        results.append(SyncResult(Category.IGNORE, label, Outcome.APPENDED, message))

    return results
