"""Tests for the direnv allow stage."""

from pathlib import Path

import pytest

from nixkit.core import direnv
from nixkit.core.executor import RecordingExecutor
from nixkit.core.report import Reporter


class TestDirenvAllow:
    def test_not_installed(self, tmp_path: Path, reporter: Reporter, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(direnv.shutil, "which", lambda name: None)
        (tmp_path / ".envrc").write_text("use flake\n")
        recorder = RecordingExecutor()

        assert direnv.direnv_allow(tmp_path, recorder, reporter) is False
        assert recorder.actions == []

    def test_no_envrc(self, tmp_path: Path, reporter: Reporter, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(direnv.shutil, "which", lambda name: "/usr/bin/direnv")
        recorder = RecordingExecutor()

        assert direnv.direnv_allow(tmp_path, recorder, reporter) is False
        assert recorder.actions == []

    def test_allow(self, tmp_path: Path, reporter: Reporter, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(direnv.shutil, "which", lambda name: "/usr/bin/direnv")
        (tmp_path / ".envrc").write_text("use flake\n")
        recorder = RecordingExecutor()

        assert direnv.direnv_allow(tmp_path, recorder, reporter) is True
        assert [a.args for a in recorder.actions] == [("direnv", "allow")]
