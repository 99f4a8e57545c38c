"""Built-in exclusion policy for directory scans.

Decides which directories and files are left out of a file tree
regardless of any .gitignore content: dependency folders, build output,
caches, editor metadata, binary assets, lockfiles and minified bundles.
"""

from dataclasses import dataclass
from typing import Iterable

_DEFAULT_EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        "vendor",
        ".git",
        "__pycache__",
        ".venv",
        "venv",
        ".env",
        "env",
        ".tox",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        "dist",
        "build",
        ".next",
        ".nuxt",
        ".output",
        ".cache",
        ".tmp",
        ".temp",
        "coverage",
        ".nyc_output",
        ".parcel-cache",
        ".turbo",
        ".vercel",
        ".netlify",
        "target",
        ".gradle",
        ".idea",
        ".vscode",
        ".vs",
        ".DS_Store",
        "Thumbs.db",
        ".svn",
        ".hg",
    }
)

_DEFAULT_EXCLUDED_EXTENSIONS = frozenset(
    {
        # compiled objects and archives
        ".pyc",
        ".pyo",
        ".so",
        ".dll",
        ".dylib",
        ".class",
        ".jar",
        ".war",
        ".ear",
        ".o",
        ".a",
        ".lib",
        ".exe",
        ".bin",
        # images
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".bmp",
        ".ico",
        ".svg",
        ".webp",
        # audio and video
        ".mp3",
        ".mp4",
        ".wav",
        ".avi",
        ".mov",
        ".webm",
        ".flv",
        # fonts
        ".woff",
        ".woff2",
        ".ttf",
        ".eot",
        ".otf",
        # documents and compressed files
        ".pdf",
        ".zip",
        ".tar",
        ".gz",
        ".rar",
        ".7z",
        ".lock",
        ".map",
    }
)

_DEFAULT_EXCLUDED_FILES = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "poetry.lock",
        "Pipfile.lock",
        "composer.lock",
        "Gemfile.lock",
        "Cargo.lock",
        "go.sum",
        ".gitignore",
        ".gitattributes",
        ".editorconfig",
        ".prettierrc",
        ".eslintrc",
        ".eslintignore",
        "tsconfig.tsbuildinfo",
    }
)

# Compound suffixes that a single-extension lookup cannot express.
_DEFAULT_MINIFIED_SUFFIXES = (".min.js", ".min.css")


def file_extension(name: str) -> str:
    """Return the extension of a file name, including the leading dot.

    The extension starts at the last dot, so ``.bashrc`` is its own
    extension and ``Makefile`` has none.

    Args:
        name: Final path segment.

    Returns:
        The extension, or an empty string if the name has no dot.
    """
    index = name.rfind(".")
    if index == -1:
        return ""
    return name[index:]


@dataclass(frozen=True)
class ExclusionPolicy:
    """Immutable rule set deciding which entries a scan omits.

    Names are matched case-sensitively against the final path segment.

    Attributes:
        excluded_dir_names: Directory names whose whole subtree is pruned.
        excluded_file_names: Exact file names to omit.
        excluded_extensions: File extensions (with leading dot) to omit.
        minified_suffixes: Name suffixes identifying minified assets.
    """

    excluded_dir_names: frozenset[str] = _DEFAULT_EXCLUDED_DIRS
    excluded_file_names: frozenset[str] = _DEFAULT_EXCLUDED_FILES
    excluded_extensions: frozenset[str] = _DEFAULT_EXCLUDED_EXTENSIONS
    minified_suffixes: tuple[str, ...] = _DEFAULT_MINIFIED_SUFFIXES

    @classmethod
    def default(cls) -> "ExclusionPolicy":
        """Return the built-in policy."""
        return cls()

    def with_extras(
        self,
        dirs: Iterable[str] = (),
        files: Iterable[str] = (),
        extensions: Iterable[str] = (),
    ) -> "ExclusionPolicy":
        """Return a new policy extended with additional exclusions.

        Extensions given without a leading dot get one added.

        Args:
            dirs: Extra directory names to prune.
            files: Extra exact file names to omit.
            extensions: Extra file extensions to omit.

        Returns:
            A new ExclusionPolicy; this instance is left unchanged.
        """
        normalized = {ext if ext.startswith(".") else f".{ext}" for ext in extensions}
        return ExclusionPolicy(
            excluded_dir_names=self.excluded_dir_names | frozenset(dirs),
            excluded_file_names=self.excluded_file_names | frozenset(files),
            excluded_extensions=self.excluded_extensions | frozenset(normalized),
            minified_suffixes=self.minified_suffixes,
        )

    def should_skip_directory(self, name: str) -> bool:
        """Check whether a directory and its whole subtree are pruned."""
        return name in self.excluded_dir_names

    def should_skip_file(self, name: str, extension: str) -> bool:
        """Check whether a file is omitted.

        Rules apply in order: exact name, extension, then minified suffix.

        Args:
            name: The file name.
            extension: The file extension as returned by file_extension().

        Returns:
            True if any rule matches.
        """
        if name in self.excluded_file_names:
            return True
        if extension in self.excluded_extensions:
            return True
        return name.endswith(self.minified_suffixes)
