"""Tests for directory scanning and README discovery."""

import os
from pathlib import Path

import pytest

from repodiagram.errors import RootResolutionError
from repodiagram.scanner.exclusions import ExclusionPolicy
from repodiagram.scanner.file_tree import (
    README_CANDIDATES,
    DirectoryScanner,
    find_readme,
    resolve_root,
    scan_directory,
)


def _touch(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """Create a small JavaScript project."""
    _touch(tmp_path, "src/index.js", "console.log('hi')\n")
    _touch(tmp_path, "node_modules/pkg/index.js", "module.exports = {}\n")
    _touch(tmp_path, "README.md", "# Sample\n\nA sample project.\n")
    return tmp_path


class TestResolveRoot:
    """Tests for root resolution."""

    def test_relative_path_is_made_absolute(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "proj").mkdir()
        monkeypatch.chdir(tmp_path)
        resolved = resolve_root("proj")
        assert resolved.is_absolute()
        assert resolved == (tmp_path / "proj").resolve()

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(RootResolutionError) as exc_info:
            resolve_root(tmp_path / "missing")
        assert "missing" in str(exc_info.value)
        assert exc_info.value.root.endswith("missing")

    def test_file_root(self, tmp_path: Path) -> None:
        file_path = _touch(tmp_path, "file.txt")
        with pytest.raises(RootResolutionError, match="not a directory"):
            resolve_root(file_path)


class TestScanDirectory:
    """Tests for the file tree listing."""

    def test_end_to_end_listing(self, sample_repo: Path) -> None:
        listing = scan_directory(sample_repo)
        assert listing == "README.md\nsrc/\nsrc/index.js"

    def test_excluded_directory_pruned_with_descendants(self, tmp_path: Path) -> None:
        _touch(tmp_path, "node_modules/pkg/src/deep/ok.py")
        _touch(tmp_path, "app/node_modules/lib.js")
        _touch(tmp_path, "app/main.py")
        listing = scan_directory(tmp_path)
        assert "node_modules" not in listing
        assert listing.splitlines() == ["app/", "app/main.py"]

    def test_file_rules(self, tmp_path: Path) -> None:
        for name in ["yarn.lock", "app.min.js", "style.min.css", "logo.png", "app.js"]:
            _touch(tmp_path, name)
        assert scan_directory(tmp_path).splitlines() == ["app.js"]

    def test_directories_marked_with_trailing_slash(self, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()
        _touch(tmp_path, "pkg/mod.py")
        lines = scan_directory(tmp_path).splitlines()
        assert "empty/" in lines
        assert "pkg/" in lines
        assert "pkg/mod.py" in lines

    def test_sorted_by_code_point(self, tmp_path: Path) -> None:
        for name in ["b.py", "B.py", "a.py", "_x.py", "a/z.py"]:
            _touch(tmp_path, name)
        lines = scan_directory(tmp_path).splitlines()
        assert lines == sorted(lines)
        assert lines == ["B.py", "_x.py", "a.py", "a/", "a/z.py", "b.py"]

    def test_no_trailing_newline(self, sample_repo: Path) -> None:
        assert not scan_directory(sample_repo).endswith("\n")

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert scan_directory(tmp_path) == ""

    def test_deterministic(self, sample_repo: Path) -> None:
        _touch(sample_repo, "lib/util.js")
        _touch(sample_repo, "docs/guide.md")
        first = scan_directory(sample_repo)
        second = scan_directory(sample_repo)
        assert first == second

    def test_uses_posix_separators(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a/b/c.txt")
        assert scan_directory(tmp_path).splitlines() == ["a/", "a/b/", "a/b/c.txt"]


class TestGitignore:
    """Tests for ignore-file handling during scans."""

    def test_ignored_files_and_directories(self, tmp_path: Path) -> None:
        _touch(tmp_path, ".gitignore", "generated/\n*.log\n")
        _touch(tmp_path, "generated/out.py")
        _touch(tmp_path, "debug.log")
        _touch(tmp_path, "src/main.py")
        assert scan_directory(tmp_path).splitlines() == ["src/", "src/main.py"]

    def test_gitignore_itself_is_excluded(self, tmp_path: Path) -> None:
        _touch(tmp_path, ".gitignore", "*.tmp\n")
        _touch(tmp_path, "keep.py")
        assert scan_directory(tmp_path) == "keep.py"

    def test_negation_cannot_bypass_exclusion_policy(self, tmp_path: Path) -> None:
        _touch(tmp_path, ".gitignore", "!node_modules/\n!yarn.lock\n")
        _touch(tmp_path, "node_modules/pkg/index.js")
        _touch(tmp_path, "yarn.lock")
        _touch(tmp_path, "index.js")
        assert scan_directory(tmp_path) == "index.js"

    def test_use_gitignore_disabled(self, tmp_path: Path) -> None:
        _touch(tmp_path, ".gitignore", "*.log\n")
        _touch(tmp_path, "debug.log")
        assert scan_directory(tmp_path, use_gitignore=False) == "debug.log"

    def test_malformed_gitignore_degrades_silently(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_bytes(b"\xff\xfe*.py\n")
        _touch(tmp_path, "main.py")
        assert scan_directory(tmp_path) == "main.py"


class TestFilesystemAnomalies:
    """Tests for graceful handling of unreadable entries."""

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_broken_symlink_skipped(self, tmp_path: Path) -> None:
        _touch(tmp_path, "real.py")
        os.symlink(tmp_path / "missing.py", tmp_path / "dangling.py")
        assert scan_directory(tmp_path) == "real.py"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed(self, tmp_path: Path) -> None:
        _touch(tmp_path, "real/inner.py")
        os.symlink(tmp_path / "real", tmp_path / "alias", target_is_directory=True)
        lines = scan_directory(tmp_path).splitlines()
        assert "alias" in lines
        assert "alias/inner.py" not in lines
        assert "real/inner.py" in lines

    @pytest.mark.skipif(
        os.name != "posix" or os.geteuid() == 0,
        reason="permission bits are not enforced for this user",
    )
    def test_unreadable_directory_skipped(self, tmp_path: Path) -> None:
        _touch(tmp_path, "open/a.py")
        _touch(tmp_path, "locked/b.py")
        locked = tmp_path / "locked"
        locked.chmod(0o000)
        try:
            lines = scan_directory(tmp_path).splitlines()
        finally:
            locked.chmod(0o755)
        assert "open/a.py" in lines
        assert "locked/" in lines
        assert "locked/b.py" not in lines


class TestDirectoryScanner:
    """Tests for the DirectoryScanner class."""

    def test_collect_returns_sorted_list(self, sample_repo: Path) -> None:
        scanner = DirectoryScanner(sample_repo)
        assert scanner.collect() == ["README.md", "src/", "src/index.js"]

    def test_root_is_resolved(self, sample_repo: Path) -> None:
        scanner = DirectoryScanner(str(sample_repo))
        assert scanner.root == sample_repo.resolve()

    def test_custom_policy(self, sample_repo: Path) -> None:
        policy = ExclusionPolicy.default().with_extras(dirs=["src"])
        scanner = DirectoryScanner(sample_repo, policy=policy)
        assert scanner.scan() == "README.md"

    def test_invalid_root_fails_at_construction(self, tmp_path: Path) -> None:
        with pytest.raises(RootResolutionError):
            DirectoryScanner(tmp_path / "nope")


class TestFindReadme:
    """Tests for README discovery."""

    def test_finds_readme_md(self, sample_repo: Path) -> None:
        assert find_readme(sample_repo) == "# Sample\n\nA sample project.\n"

    def test_not_found(self, tmp_path: Path) -> None:
        _touch(tmp_path, "main.py")
        assert find_readme(tmp_path) is None

    def test_candidate_order(self, tmp_path: Path) -> None:
        _touch(tmp_path, "README.rst", "rst")
        _touch(tmp_path, "README.txt", "txt")
        assert find_readme(tmp_path) == "txt"

    def test_plain_readme(self, tmp_path: Path) -> None:
        _touch(tmp_path, "README", "plain")
        assert find_readme(tmp_path) == "plain"

    def test_directory_named_readme_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").mkdir()
        _touch(tmp_path, "README.rst", "rst")
        assert find_readme(tmp_path) == "rst"

    def test_undecodable_bytes_replaced(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_bytes(b"caf\xe9")
        assert find_readme(tmp_path) == "caf\ufffd"

    def test_candidates(self) -> None:
        assert README_CANDIDATES[0] == "README.md"
        assert README_CANDIDATES[-1] == "Readme.md"
        assert len(README_CANDIDATES) == 7
