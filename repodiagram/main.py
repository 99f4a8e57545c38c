"""Entry point for repodiagram.

Delegates to the Click command, which loads configuration and sets up
logging itself.
"""

from repodiagram.cli.commands import repodiagram


def main() -> None:
    """Launch the CLI."""
    repodiagram()


if __name__ == "__main__":
    main()
