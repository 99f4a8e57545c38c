"""Directory scanning and README discovery.

Walks a repository depth-first, applies the exclusion policy and the
repository's .gitignore, and renders a sorted listing of relative paths
that serves as the file tree for the generation pipeline.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from repodiagram.errors import RootResolutionError
from repodiagram.scanner.exclusions import ExclusionPolicy, file_extension
from repodiagram.scanner.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

README_CANDIDATES = (
    "README.md",
    "README.MD",
    "readme.md",
    "README",
    "README.txt",
    "README.rst",
    "Readme.md",
)


def resolve_root(root: PathLike) -> Path:
    """Resolve a scan root to an absolute, readable directory.

    Args:
        root: Path to the repository root.

    Returns:
        The absolute, resolved root path.

    Raises:
        RootResolutionError: If the path does not exist, is not a
            directory, or cannot be listed.
    """
    try:
        resolved = Path(root).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise RootResolutionError(str(root), str(e)) from e

    if not resolved.is_dir():
        raise RootResolutionError(str(root), "not a directory")
    if not os.access(resolved, os.R_OK | os.X_OK):
        raise RootResolutionError(str(root), "permission denied")
    return resolved


class DirectoryScanner:
    """Produces the file tree listing for a repository.

    Directories excluded by the policy or the ignore file are pruned with
    their whole subtree. Entries that cannot be inspected are skipped so
    that a partially readable tree still yields a listing.
    """

    def __init__(
        self,
        root: PathLike,
        policy: Optional[ExclusionPolicy] = None,
        use_gitignore: bool = True,
    ) -> None:
        """Initialize the scanner.

        Args:
            root: Path to the repository root.
            policy: Exclusion policy. Uses the built-in policy if omitted.
            use_gitignore: Whether to honour the root .gitignore.

        Raises:
            RootResolutionError: If the root cannot be resolved.
        """
        self.root = resolve_root(root)
        self.policy = policy or ExclusionPolicy.default()
        self.use_gitignore = use_gitignore

    def collect(self) -> list[str]:
        """Walk the tree and return the sorted relative paths.

        Directories carry a trailing ``/``. Sorting is by code point, so
        the result does not depend on filesystem iteration order.

        Returns:
            Sorted list of recorded relative paths.
        """
        ignore = IgnoreMatcher.load(self.root) if self.use_gitignore else IgnoreMatcher()
        paths: list[str] = []
        self._walk(self.root, "", ignore, paths)
        paths.sort()
        logger.debug("Scanned %s: %d entries", self.root, len(paths))
        return paths

    def scan(self) -> str:
        """Return the newline-joined file tree listing."""
        return "\n".join(self.collect())

    def _walk(
        self,
        directory: Path,
        prefix: str,
        ignore: IgnoreMatcher,
        paths: list[str],
    ) -> None:
        """Recursively record the entries below a directory.

        Args:
            directory: Absolute path of the directory to list.
            prefix: Relative path of the directory, with trailing slash,
                or an empty string for the root.
            ignore: Compiled ignore rules.
            paths: Accumulator for recorded paths.
        """
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return

        for entry in entries:
            name = entry.name
            relative = prefix + name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                if entry.is_symlink() and not os.path.exists(entry.path):
                    logger.debug("Skipping broken symlink %s", relative)
                    continue
            except OSError as e:
                logger.debug("Skipping %s: %s", relative, e)
                continue

            if is_dir:
                if self.policy.should_skip_directory(name):
                    continue
                if ignore.matches(relative, is_dir=True):
                    continue
                paths.append(relative + "/")
                self._walk(Path(entry.path), relative + "/", ignore, paths)
                continue

            if self.policy.should_skip_file(name, file_extension(name)):
                continue
            if ignore.matches(relative):
                continue
            paths.append(relative)


def scan_directory(
    root: PathLike,
    policy: Optional[ExclusionPolicy] = None,
    use_gitignore: bool = True,
) -> str:
    """Scan a repository and return its file tree listing.

    Args:
        root: Path to the repository root.
        policy: Exclusion policy. Uses the built-in policy if omitted.
        use_gitignore: Whether to honour the root .gitignore.

    Returns:
        Relative paths sorted lexicographically and joined with newlines,
        directories suffixed with ``/``.

    Raises:
        RootResolutionError: If the root cannot be resolved.
    """
    return DirectoryScanner(root, policy=policy, use_gitignore=use_gitignore).scan()


def find_readme(root: PathLike) -> Optional[str]:
    """Return the content of the repository README, if there is one.

    Candidates are probed in a fixed order and the first readable one
    wins. Undecodable bytes are replaced rather than failing.

    Args:
        root: Path to the repository root.

    Returns:
        The README text, or None if no candidate exists.
    """
    base = Path(root)
    for name in README_CANDIDATES:
        candidate = base / name
        try:
            content = candidate.read_bytes()
        except OSError:
            continue
        logger.debug("Found README at %s (%d bytes)", candidate, len(content))
        return content.decode("utf-8", errors="replace")

    logger.debug("No README found in %s", base)
    return None
