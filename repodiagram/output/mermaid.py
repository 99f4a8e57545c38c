"""Mermaid output post-processing and writing."""

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_CLICK_LINE = re.compile(r"^[ \t]*click[ \t]+\S.*(?:\r?\n|\Z)", re.MULTILINE)


def remove_click_events(diagram: str) -> str:
    """Strip ``click`` directives from Mermaid diagram text.

    Args:
        diagram: Mermaid.js diagram code.

    Returns:
        The diagram without any click lines.
    """
    cleaned = _CLICK_LINE.sub("", diagram)
    return cleaned.rstrip("\n") if not diagram.endswith("\n") else cleaned


def write_output(content: str, output_path: str) -> Path:
    """Write rendered output to a file, creating parent directories.

    Args:
        content: Diagram or HTML text.
        output_path: Destination file path.

    Returns:
        Path to the written file.
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote %d bytes to %s", len(content.encode("utf-8")), path)
    return path
