"""Tests for .gitignore-based ignore rules."""

from pathlib import Path
from unittest.mock import patch

import pytest

from repodiagram.scanner.ignore import IgnoreMatcher


class TestEmptyMatcher:
    """Tests for a matcher without rules."""

    def test_matches_nothing(self) -> None:
        matcher = IgnoreMatcher()
        assert matcher.active is False
        assert matcher.matches("anything.py") is False
        assert matcher.matches("build", is_dir=True) is False


class TestFromLines:
    """Tests for pattern semantics."""

    def test_glob_pattern(self) -> None:
        matcher = IgnoreMatcher.from_lines(["*.log"])
        assert matcher.matches("debug.log") is True
        assert matcher.matches("logs/debug.log") is True
        assert matcher.matches("debug.txt") is False

    def test_directory_only_pattern(self) -> None:
        matcher = IgnoreMatcher.from_lines(["out/"])
        assert matcher.matches("out", is_dir=True) is True
        assert matcher.matches("out") is False

    def test_trailing_slash_directory_path(self) -> None:
        matcher = IgnoreMatcher.from_lines(["out/"])
        assert matcher.matches("out/", is_dir=True) is True

    def test_anchored_pattern(self) -> None:
        matcher = IgnoreMatcher.from_lines(["/config.local"])
        assert matcher.matches("config.local") is True
        assert matcher.matches("sub/config.local") is False

    def test_negation_reincludes(self) -> None:
        matcher = IgnoreMatcher.from_lines(["*.env", "!example.env"])
        assert matcher.matches("prod.env") is True
        assert matcher.matches("example.env") is False

    def test_comments_and_blank_lines(self) -> None:
        matcher = IgnoreMatcher.from_lines(["# comment", "", "secret.txt"])
        assert matcher.matches("secret.txt") is True
        assert matcher.matches("# comment") is False


class TestLoad:
    """Tests for loading the ignore file from a repository root."""

    def test_missing_file(self, tmp_path: Path) -> None:
        matcher = IgnoreMatcher.load(tmp_path)
        assert matcher.active is False

    def test_loads_root_gitignore(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_text("generated/\n*.tmp\n")
        matcher = IgnoreMatcher.load(tmp_path)
        assert matcher.active is True
        assert matcher.matches("generated", is_dir=True) is True
        assert matcher.matches("notes.tmp") is True

    def test_gitignore_directory_is_not_a_file(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").mkdir()
        matcher = IgnoreMatcher.load(tmp_path)
        assert matcher.active is False

    def test_undecodable_file_degrades_to_no_rules(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_bytes(b"\xff\xfe\xfa bad")
        matcher = IgnoreMatcher.load(tmp_path)
        assert matcher.active is False

    @pytest.mark.parametrize("error", [OSError("boom"), ValueError("bad pattern")])
    def test_unusable_file_degrades_to_no_rules(
        self, tmp_path: Path, error: Exception
    ) -> None:
        (tmp_path / ".gitignore").write_text("*.log\n")
        with patch.object(IgnoreMatcher, "from_lines", side_effect=error):
            matcher = IgnoreMatcher.load(tmp_path)
        assert matcher.active is False
        assert matcher.matches("a.log") is False
