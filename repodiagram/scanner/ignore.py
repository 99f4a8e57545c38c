"""Repository-local ignore rules.

Compiles a root-level .gitignore into a predicate over relative paths.
Pattern semantics (negation, anchoring, directory-only patterns) come
from pathspec's gitignore implementation.
"""

import logging
from pathlib import Path
from typing import Optional

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".gitignore"


class IgnoreMatcher:
    """Predicate deciding whether a relative path is ignored.

    A matcher without a spec matches nothing, which is how a missing or
    unusable ignore file is represented.
    """

    def __init__(self, spec: Optional[pathspec.PathSpec] = None) -> None:
        self._spec = spec

    @classmethod
    def from_lines(cls, lines: list[str]) -> "IgnoreMatcher":
        """Compile ignore patterns given as lines of text.

        Raises:
            ValueError: If a pattern cannot be compiled.
        """
        return cls(pathspec.GitIgnoreSpec.from_lines(lines))

    @classmethod
    def load(cls, root: Path) -> "IgnoreMatcher":
        """Load the ignore file at the root of a repository.

        An absent, unreadable or malformed file yields a matcher that
        matches nothing; the scan is never aborted because of it.

        Args:
            root: Absolute path to the repository root.

        Returns:
            An IgnoreMatcher for the repository.
        """
        ignore_path = root / IGNORE_FILE_NAME
        if not ignore_path.is_file():
            return cls()

        try:
            lines = ignore_path.read_text(encoding="utf-8").splitlines()
            matcher = cls.from_lines(lines)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.debug("Ignoring unusable %s: %s", ignore_path, e)
            return cls()

        logger.debug("Loaded %d ignore patterns from %s", len(lines), ignore_path)
        return matcher

    @property
    def active(self) -> bool:
        """Whether any ignore rules were loaded."""
        return self._spec is not None

    def matches(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check whether a path relative to the root is ignored.

        Args:
            relative_path: POSIX-style path relative to the scan root.
            is_dir: Whether the path names a directory. Directory paths
                are matched with a trailing slash so that directory-only
                patterns apply.

        Returns:
            True if the ignore rules exclude the path.
        """
        if self._spec is None:
            return False
        if is_dir and not relative_path.endswith("/"):
            relative_path += "/"
        return self._spec.match_file(relative_path)
