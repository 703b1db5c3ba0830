"""Tests for the review-marker audit."""

from pathlib import Path

from nixkit.core.audit import find_marked_files, is_text_file

MARKER = "nixkit: review-disabled"


class TestFindMarkedFiles:
    def test_finds_marked_files(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.py").write_text(f"import os  # noqa  {MARKER}\n")
        (tmp_path / "b.sh").write_text(f"# shellcheck disable=SC2086 {MARKER}\n")
        (tmp_path / "clean.py").write_text("print('ok')\n")

        assert find_marked_files(tmp_path, MARKER) == ["b.sh", "src/a.py"]

    def test_none_found(self, tmp_path: Path) -> None:
        (tmp_path / "clean.py").write_text("print('ok')\n")

        assert find_marked_files(tmp_path, MARKER) == []

    def test_skips_git_and_binary(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "COMMIT_EDITMSG").write_text(MARKER)
        (tmp_path / "image.bin").write_bytes(b"\x00\x01" + MARKER.encode())

        assert find_marked_files(tmp_path, MARKER) == []

    def test_missing_root(self, tmp_path: Path) -> None:
        assert find_marked_files(tmp_path / "absent", MARKER) == []

    def test_empty_marker_matches_nothing(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("text\n")

        assert find_marked_files(tmp_path, "") == []


class TestIsTextFile:
    def test_text(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_text("hello\n")

        assert is_text_file(path) is True

    def test_binary(self, tmp_path: Path) -> None:
        path = tmp_path / "a.bin"
        path.write_bytes(b"\x00abc")

        assert is_text_file(path) is False
