"""Tests for the nixkit-sync command line."""

from pathlib import Path

import pytest

from conftest import output_of, snapshot

from nixkit.core.report import Reporter
from nixkit.main import BootstrapReport, _render_summary, build_parser, main
from nixkit.models.config import Category, Outcome, SyncResult


def cli_args(workspace: dict[str, Path], *extra: str) -> list[str]:
    return [
        "--template-dir",
        str(workspace["template"]),
        "--kit-dir",
        str(workspace["kit"]),
        "--target-dir",
        str(workspace["target"]),
        "--no-direnv",
        *extra,
    ]


class TestArgumentParsing:
    """Tests for flag handling."""

    def test_force_parsed(self) -> None:
        args = build_parser().parse_args(["--force=files,stubs"])

        assert args.force[Category.FILES] is True
        assert args.force[Category.WORKFLOWS] is False

    def test_dry_run_short_flag(self) -> None:
        assert build_parser().parse_args(["-n"]).dry_run is True

    def test_unknown_force_token_exits_before_mutation(
        self, workspace: dict[str, Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        before = snapshot(workspace["target"])

        with pytest.raises(SystemExit) as excinfo:
            main(cli_args(workspace, "--no-git", "--force=bogus"))

        assert excinfo.value.code != 0
        assert "Unknown force target: bogus" in capsys.readouterr().err
        assert snapshot(workspace["target"]) == before

    def test_unknown_flag(self, workspace: dict[str, Path]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(cli_args(workspace, "--frobnicate"))

        assert excinfo.value.code != 0


class TestMain:
    """Tests for whole runs without git."""

    def test_missing_template_dir(self, workspace: dict[str, Path], tmp_path: Path) -> None:
        args = cli_args(workspace, "--no-git")
        args[1] = str(tmp_path / "missing")

        assert main(args) == 1
        assert snapshot(workspace["target"]) == {}

    def test_run_without_git(self, workspace: dict[str, Path]) -> None:
        assert main(cli_args(workspace, "--no-git")) == 0

        target = workspace["target"]
        assert (target / "flake.nix").is_file()
        assert (target / "renovate.json").is_file()
        assert (target / "src" / "pkg" / "__init__.py").is_file()
        assert (target / ".github" / "workflows" / "nested" / "deploy.yaml").is_file()
        assert (target / ".gitignore").is_file()

    def test_second_run_is_noop(self, workspace: dict[str, Path]) -> None:
        main(cli_args(workspace, "--no-git"))
        first = snapshot(workspace["target"])

        assert main(cli_args(workspace, "--no-git")) == 0
        assert snapshot(workspace["target"]) == first

    def test_dry_run(self, workspace: dict[str, Path], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(cli_args(workspace, "--no-git", "--dry-run")) == 0

        assert snapshot(workspace["target"]) == {}
        assert "DRY-RUN" in capsys.readouterr().out

    def test_config_file_in_template_dir(self, workspace: dict[str, Path]) -> None:
        (workspace["template"] / "nixkit.yaml").write_text("files:\n  - flake.nix\n")

        assert main(cli_args(workspace, "--no-git")) == 0

        target = workspace["target"]
        assert (target / "flake.nix").is_file()
        assert not (target / "renovate.json").exists()

    def test_not_a_repository_fails(self, workspace: dict[str, Path]) -> None:
        assert main(cli_args(workspace)) == 1
        assert snapshot(workspace["target"]) == {}


class TestBootstrapReport:
    def test_changed_paths_unique(self) -> None:
        report = BootstrapReport(
            results=[
                SyncResult(Category.IGNORE, ".gitignore", Outcome.APPENDED, ""),
                SyncResult(Category.IGNORE, ".gitignore", Outcome.APPENDED, ""),
                SyncResult(Category.FILES, "flake.nix", Outcome.SKIPPED_EXISTS, ""),
                SyncResult(Category.STUBS, "README.md", Outcome.COPIED, ""),
            ]
        )

        assert report.changed_paths() == [".gitignore", "README.md"]
        assert report.count(Outcome.APPENDED) == 2

    def test_summary_table(self, reporter: Reporter) -> None:
        report = BootstrapReport(
            results=[
                SyncResult(Category.FILES, "flake.nix", Outcome.COPIED, ""),
                SyncResult(Category.FILES, ".envrc", Outcome.COPIED, ""),
                SyncResult(Category.FILES, "renovate.json", Outcome.SKIPPED_MISSING_SOURCE, ""),
            ],
            primary_branch="main",
        )

        _render_summary(reporter, report)

        rows = {line.split("│")[1].strip(): line.split("│")[2].strip() for line in table_rows(reporter)}
        assert rows["Copied"] == "2"
        assert rows["Missing templates"] == "1"
        assert rows["Skipped (exists)"] == "0"
        assert "Branched from main" in output_of(reporter)


def table_rows(reporter: Reporter) -> list[str]:
    return [line for line in output_of(reporter).splitlines() if line.count("│") == 3]
