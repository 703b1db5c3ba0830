#!/usr/bin/env python3
"""CLI entry point for the nixkit template synchronizer."""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path

from rich.table import Table

from .core.audit import find_marked_files
from .core.direnv import direnv_allow
from .core.executor import Executor, LocalExecutor, RecordingExecutor
from .core.git import GitRepository
from .core.operations import TemplateSynchronizer
from .core.report import Reporter
from .errors import ConfigError, NixkitError
from .models.config import Category, KitConfig, Outcome, RunConfig, SyncResult, parse_force_spec


@dataclass
class BootstrapReport:
    """Everything a run decided, for the summary."""

    results: list[SyncResult] = field(default_factory=list)
    audit_hits: list[str] = field(default_factory=list)
    primary_branch: str | None = None

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    def changed_paths(self) -> list[str]:
        """Unique destinations that were copied or appended to, in order."""
        seen: dict[str, None] = {}
        for result in self.results:
            if result.outcome.changed:
                seen.setdefault(result.path, None)
        return list(seen)


def run_bootstrap(
    run_config: RunConfig,
    kit: KitConfig,
    executor: Executor,
    reporter: Reporter,
) -> BootstrapReport:
    """Run every stage: git prep, copies, staging, direnv and audit.

    Raises:
        NixkitError: If git preparation fails; nothing has been copied yet
    """
    report = BootstrapReport()
    repo = GitRepository(run_config.target_dir, executor, reporter)

    if run_config.git_enabled:
        reporter.step("Preparing git")
        report.primary_branch = repo.prepare(kit.git)

    synchronizer = TemplateSynchronizer(run_config, kit, executor, reporter)
    report.results = synchronizer.sync_all()

    if run_config.git_enabled:
        reporter.step("Staging changes")
        repo.stage(report.changed_paths())

    if run_config.direnv_enabled:
        reporter.step("direnv")
        direnv_allow(run_config.target_dir, executor, reporter)

    reporter.step("Audit")
    report.audit_hits = find_marked_files(run_config.target_dir, kit.audit_marker)
    _render_audit(reporter, report.audit_hits, kit.audit_marker)

    return report


def _render_audit(reporter: Reporter, hits: list[str], marker: str) -> None:
    """Print the audit result. Hits need a human look; they never fail the run."""
    if not hits:
        reporter.success(f"No files contain '{marker}'")
        return

    reporter.warn(f"{len(hits)} file(s) contain '{marker}' and need manual review")
    table = Table(title="Needs review")
    table.add_column("Path", style="yellow")
    for hit in hits:
        table.add_row(hit)
    reporter.console.print(table)


SUMMARY_ROWS = [
    (Outcome.COPIED, "Copied", "green"),
    (Outcome.APPENDED, "Ignore rules added", "green"),
    (Outcome.SKIPPED_EXISTS, "Skipped (exists)", "yellow"),
    (Outcome.ALREADY_PRESENT, "Ignore rules already present", "dim"),
    (Outcome.SKIPPED_MISSING_SOURCE, "Missing templates", "yellow"),
]


def _render_summary(reporter: Reporter, report: BootstrapReport) -> None:
    table = Table(title="Summary")
    table.add_column("Outcome")
    table.add_column("Count", justify="right")
    for outcome, label, style in SUMMARY_ROWS:
        count = report.count(outcome)
        table.add_row(label, str(count), style=style if count else "dim")
    if report.primary_branch:
        table.caption = f"Branched from {report.primary_branch}"
    reporter.console.print(table)


def _force_type(value: str) -> dict[Category, bool]:
    try:
        return parse_force_spec(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nixkit-sync",
        description="Copy Nix dev-environment templates, CI workflows and ignore rules into a repository",
    )
    parser.add_argument("-n", "--dry-run", action="store_true", help="Show what would happen")
    parser.add_argument("--no-git", action="store_true", help="Skip branch preparation and staging")
    parser.add_argument("--no-direnv", action="store_true", help="Skip 'direnv allow'")
    parser.add_argument(
        "--force",
        type=_force_type,
        metavar="all|files,stubs,workflows",
        help="Overwrite existing destinations of these categories",
    )
    parser.add_argument("--template-dir", help="Template root (default: $NIXKIT_TEMPLATE_DIR)")
    parser.add_argument("--kit-dir", help="Stubs/workflows/ignore lists (default: $NIXKIT_KIT_DIR or bundled kit)")
    parser.add_argument("--target-dir", help="Repository to bootstrap (default: current directory)")
    parser.add_argument("--config", help="Kit configuration YAML (default: <template-dir>/nixkit.yaml)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    reporter = Reporter()

    try:
        run_config = RunConfig.resolve(
            template_dir=args.template_dir,
            kit_dir=args.kit_dir,
            target_dir=args.target_dir,
            dry_run=args.dry_run,
            git_enabled=not args.no_git,
            direnv_enabled=not args.no_direnv,
            overwrite=args.force,
        )
        kit = KitConfig.discover(
            run_config.template_dir,
            Path(args.config).expanduser() if args.config else None,
        )
    except ConfigError as e:
        reporter.error(str(e))
        return 1

    if run_config.dry_run:
        reporter.info("Running in DRY-RUN mode")
        executor: Executor = RecordingExecutor(reporter)
    else:
        executor = LocalExecutor()

    try:
        report = run_bootstrap(run_config, kit, executor, reporter)
    except NixkitError as e:
        reporter.error(str(e))
        return 1

    _render_summary(reporter, report)
    reporter.info("Bootstrap complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
