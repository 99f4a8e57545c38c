"""Exception hierarchy for repodiagram.

Root resolution, phase failures and rejected instructions terminate an
invocation. Filesystem anomalies during a scan never reach this module;
they are absorbed by the scanner.
"""

from typing import Optional


class RepoDiagramError(Exception):
    """Base class for all errors raised by repodiagram."""


class ConfigError(RepoDiagramError):
    """Raised when a configuration file cannot be interpreted."""


class RootResolutionError(RepoDiagramError):
    """Raised when the scan root cannot be resolved to a readable directory.

    Attributes:
        root: The root path as given by the caller.
        reason: Human-readable explanation of the failure.
    """

    def __init__(self, root: str, reason: str) -> None:
        self.root = root
        self.reason = reason
        super().__init__(f"cannot scan {root!r}: {reason}")


class PhaseError(RepoDiagramError):
    """Raised when a pipeline phase's API round-trip fails.

    Attributes:
        phase: The 1-based phase number that failed.
        cause: The underlying exception, if any.
    """

    def __init__(self, phase: int, cause: Optional[BaseException] = None) -> None:
        self.phase = phase
        self.cause = cause
        detail = str(cause) if cause is not None else "unknown error"
        super().__init__(f"phase {phase} failed: {detail}")


class GenerationCancelledError(PhaseError):
    """Raised when a phase is aborted by a cancel signal or a timeout."""

    def __init__(self, phase: int, cause: Optional[BaseException] = None) -> None:
        super().__init__(phase, cause)
        detail = f": {cause}" if cause is not None else ""
        self.args = (f"phase {phase} cancelled{detail}",)


class InvalidInstructionsError(RepoDiagramError):
    """Raised when the model rejects the user-supplied instructions."""

    def __init__(self) -> None:
        super().__init__(
            "the provided instructions were invalid or unclear; "
            "rephrase them or run without --instructions"
        )
