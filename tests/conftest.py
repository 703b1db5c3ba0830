"""Shared fixtures for nixkit tests."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from nixkit.core.report import Reporter
from nixkit.models.config import RunConfig, parse_force_spec


def quiet_reporter() -> Reporter:
    """Reporter writing into memory buffers."""
    return Reporter(
        Console(file=io.StringIO(), width=200),
        Console(file=io.StringIO(), width=200),
    )


def output_of(reporter: Reporter) -> str:
    return reporter.console.file.getvalue()


@pytest.fixture
def reporter() -> Reporter:
    return quiet_reporter()


@pytest.fixture
def workspace(tmp_path: Path) -> dict[str, Path]:
    """Template root, kit directory and empty target repository."""
    template = tmp_path / "template"
    (template / ".github" / "workflows").mkdir(parents=True)
    (template / "flake.nix").write_text("{ description = \"template\"; }\n")
    (template / ".envrc").write_text("use flake\n")
    (template / ".github" / "workflows" / "lint.yaml").write_text("name: lint\n")
    (template / "renovate-base.json").write_text('{"extends": ["config:base"]}\n')

    kit = tmp_path / "kit"
    (kit / "source-stubs" / "src" / "pkg").mkdir(parents=True)
    (kit / "source-stubs" / "src" / "pkg" / "__init__.py").write_text("")
    (kit / "source-stubs" / "README.md").write_text("# stub\n")
    (kit / "workflows" / "nested").mkdir(parents=True)
    (kit / "workflows" / "build.yaml").write_text("name: build\n")
    (kit / "workflows" / "nested" / "deploy.yaml").write_text("name: deploy\n")
    (kit / "git-ignore").write_text(".direnv/\nresult\n\n*.py[cod]\n")
    (kit / "docker-ignore").write_text(".git\nresult\n")

    target = tmp_path / "target"
    target.mkdir()

    return {"template": template, "kit": kit, "target": target}


def make_run_config(
    paths: dict[str, Path],
    dry_run: bool = False,
    force: str = "",
    git_enabled: bool = False,
) -> RunConfig:
    return RunConfig(
        template_dir=paths["template"],
        kit_dir=paths["kit"],
        target_dir=paths["target"],
        dry_run=dry_run,
        git_enabled=git_enabled,
        direnv_enabled=False,
        overwrite=parse_force_spec(force),
    )


def snapshot(root: Path) -> dict[str, bytes | None]:
    """Map every entry under root, outside .git, to its bytes (None for directories)."""
    return {
        path.relative_to(root).as_posix(): (path.read_bytes() if path.is_file() else None)
        for path in sorted(root.rglob("*"))
        if ".git" not in path.relative_to(root).parts
    }
