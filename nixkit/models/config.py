"""Configuration and data models for the template synchronizer."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from ..errors import ConfigError

TEMPLATE_DIR_ENV = "NIXKIT_TEMPLATE_DIR"
KIT_DIR_ENV = "NIXKIT_KIT_DIR"
DEFAULT_TEMPLATE_DIR = "~/GitHub/sdr-e-base-repo-setup"
CONFIG_FILENAME = "nixkit.yaml"

# Kit bundled with the package (source-stubs/, workflows/, ignore lists)
BUNDLED_KIT_DIR = Path(__file__).resolve().parent.parent / "kit"

DEFAULT_FILES = [
    "flake.nix",
    ".envrc",
    ".github/workflows/lint.yaml",
    "renovate-base.json:renovate.json",
]
DEFAULT_IGNORE_FILES = {
    "git-ignore": ".gitignore",
    "docker-ignore": ".dockerignore",
}
DEFAULT_AUDIT_MARKER = "nixkit: review-disabled"


class Category(str, Enum):
    """Kind of template entry; the first three can be force-overwritten."""

    FILES = "files"
    STUBS = "stubs"
    WORKFLOWS = "workflows"
    IGNORE = "ignore"


FORCE_CATEGORIES = (Category.FILES, Category.STUBS, Category.WORKFLOWS)


class Outcome(str, Enum):
    """Result of a single synchronization decision."""

    COPIED = "copied"
    SKIPPED_EXISTS = "skipped_exists"
    SKIPPED_MISSING_SOURCE = "skipped_missing_source"
    APPENDED = "appended"
    ALREADY_PRESENT = "already_present"

    @property
    def changed(self) -> bool:
        """True when the outcome wrote to the target."""
        return self in (Outcome.COPIED, Outcome.APPENDED)


def parse_force_spec(value: str) -> dict[Category, bool]:
    """Parse a ``--force`` value into an overwrite policy.

    Args:
        value: ``all`` or a comma-separated subset of files, stubs, workflows

    Returns:
        Mapping of every force category to whether it may overwrite

    Raises:
        ConfigError: If a token is not a known force category
    """
    if value.strip() == "all":
        return {category: True for category in FORCE_CATEGORIES}

    policy = {category: False for category in FORCE_CATEGORIES}
    known = {category.value: category for category in FORCE_CATEGORIES}
    for token in value.split(","):
        token = token.strip()
        if not token:
            continue
        if token not in known:
            raise ConfigError(f"Unknown force target: {token}")
        policy[known[token]] = True
    return policy


@dataclass(frozen=True)
class SyncTask:
    """A single template entry to synchronize."""

    source: str  # Relative to the category's source root
    destination: str  # Relative to the target directory
    category: Category

    @classmethod
    def parse(cls, entry: str, category: Category = Category.FILES) -> "SyncTask":
        """Create from a ``source`` or ``source:destination`` entry."""
        entry = entry.strip()
        if ":" in entry:
            source, destination = entry.split(":", 1)
        else:
            source = destination = entry
        if not source or not destination:
            raise ConfigError(f"Invalid template entry: {entry!r}")
        return cls(source=source, destination=destination, category=category)


@dataclass(frozen=True)
class RunConfig:
    """Settings for one invocation, threaded into every operation."""

    template_dir: Path
    kit_dir: Path
    target_dir: Path
    dry_run: bool = False
    git_enabled: bool = True
    direnv_enabled: bool = True
    overwrite: dict[Category, bool] = field(
        default_factory=lambda: {category: False for category in FORCE_CATEGORIES}
    )

    def may_overwrite(self, category: Category) -> bool:
        """Check whether existing destinations of a category may be replaced."""
        return self.overwrite.get(category, False)

    def source_root(self, category: Category) -> Path:
        """Directory that task sources of a category are relative to."""
        if category is Category.FILES:
            return self.template_dir
        return self.kit_dir

    @classmethod
    def resolve(
        cls,
        template_dir: str | None = None,
        kit_dir: str | None = None,
        target_dir: str | None = None,
        dry_run: bool = False,
        git_enabled: bool = True,
        direnv_enabled: bool = True,
        overwrite: dict[Category, bool] | None = None,
    ) -> "RunConfig":
        """Build a RunConfig from flags, falling back to the environment.

        Raises:
            ConfigError: If the template directory does not exist
        """
        load_dotenv(find_dotenv(usecwd=True))

        template = Path(
            template_dir or os.getenv(TEMPLATE_DIR_ENV) or DEFAULT_TEMPLATE_DIR
        ).expanduser()
        kit = Path(kit_dir or os.getenv(KIT_DIR_ENV) or BUNDLED_KIT_DIR).expanduser()
        target = Path(target_dir).expanduser() if target_dir else Path.cwd()

        if not template.is_dir():
            raise ConfigError(f"Template directory not found: {template}")

        return cls(
            template_dir=template.resolve(),
            kit_dir=kit.resolve(),
            target_dir=target.resolve(),
            dry_run=dry_run,
            git_enabled=git_enabled,
            direnv_enabled=direnv_enabled,
            overwrite=overwrite or {category: False for category in FORCE_CATEGORIES},
        )


@dataclass
class GitSettings:
    """Git preparation settings."""

    primary_branches: list[str] = field(default_factory=lambda: ["main", "master"])
    work_branch: str = "chore/nix-bootstrap"
    legacy_hook_config: str = ".pre-commit-config.yaml"
    commit_message: str = "Remove legacy pre-commit configuration"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GitSettings":
        """Create from dictionary."""
        defaults = cls()
        return cls(
            primary_branches=list(data.get("primary_branches") or defaults.primary_branches),
            work_branch=data.get("work_branch", defaults.work_branch),
            legacy_hook_config=data.get("legacy_hook_config", defaults.legacy_hook_config),
            commit_message=data.get("commit_message", defaults.commit_message),
        )


@dataclass
class KitConfig:
    """Static description of what the synchronizer copies.

    Loaded from ``nixkit.yaml`` in the template directory when present,
    otherwise the built-in defaults are used.
    """

    files: list[str] = field(default_factory=lambda: list(DEFAULT_FILES))
    stubs_dir: str = "source-stubs"
    workflows_dir: str = "workflows"
    workflows_destination: str = ".github/workflows"
    ignore_files: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_IGNORE_FILES))
    audit_marker: str = DEFAULT_AUDIT_MARKER
    git: GitSettings = field(default_factory=GitSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KitConfig":
        """Create from dictionary, keeping defaults for missing keys."""
        defaults = cls()
        kit = cls(
            files=list(data.get("files") or defaults.files),
            stubs_dir=data.get("stubs_dir", defaults.stubs_dir),
            workflows_dir=data.get("workflows_dir", defaults.workflows_dir),
            workflows_destination=data.get(
                "workflows_destination", defaults.workflows_destination
            ),
            ignore_files=dict(data.get("ignore_files") or defaults.ignore_files),
            audit_marker=data.get("audit_marker", defaults.audit_marker),
            git=GitSettings.from_dict(data.get("git") or {}),
        )
        # Bad entries must fail before git preparation starts
        kit.file_tasks()
        return kit

    @classmethod
    def load(cls, config_path: Path) -> "KitConfig":
        """Load configuration from YAML file."""
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")
        return cls.from_dict(data)

    @classmethod
    def discover(cls, template_dir: Path, config_path: Path | None = None) -> "KitConfig":
        """Load an explicit config, or ``nixkit.yaml`` from the template directory.

        Raises:
            ConfigError: If an explicitly given config file does not exist
        """
        if config_path is not None:
            if not config_path.is_file():
                raise ConfigError(f"Config not found: {config_path}")
            return cls.load(config_path)

        candidate = template_dir / CONFIG_FILENAME
        if candidate.is_file():
            return cls.load(candidate)
        return cls()

    def file_tasks(self) -> list[SyncTask]:
        """Whole-file tasks, in configured order."""
        return [SyncTask.parse(entry) for entry in self.files]

    def stub_task(self) -> SyncTask:
        """Tree task merging stub sources into the target root."""
        return SyncTask(source=self.stubs_dir, destination=".", category=Category.STUBS)

    def workflow_task(self) -> SyncTask:
        """Tree task merging workflow definitions."""
        return SyncTask(
            source=self.workflows_dir,
            destination=self.workflows_destination,
            category=Category.WORKFLOWS,
        )

    def ignore_tasks(self) -> list[SyncTask]:
        """Line-merge tasks, one per accumulator file."""
        return [
            SyncTask(source=source, destination=destination, category=Category.IGNORE)
            for source, destination in self.ignore_files.items()
        ]


@dataclass
class SyncResult:
    """Result of a single synchronization decision."""

    category: Category
    path: str  # Destination, relative to the target directory
    outcome: Outcome
    message: str
