"""HTML output for generated diagrams.

Wraps Mermaid.js diagram code in a minimal standalone page that loads
Mermaid from a CDN and renders the diagram in the browser.
"""

import logging
from typing import Optional

from repodiagram.generators.template_manager import TemplateManager

logger = logging.getLogger(__name__)


def to_html(
    diagram: str,
    title: str = "Architecture Diagram",
    template_manager: Optional[TemplateManager] = None,
) -> str:
    """Render a diagram as a standalone HTML viewer page.

    The diagram text is HTML-escaped; Mermaid reads the element's text
    content, so the rendered diagram is unchanged.

    Args:
        diagram: Mermaid.js diagram code.
        title: Page title and heading.
        template_manager: Template manager to render with.

    Returns:
        The complete HTML document.
    """
    templates = template_manager or TemplateManager()
    page = templates.render_html_viewer(diagram, title)
    logger.debug("Rendered HTML viewer (%d chars)", len(page))
    return page
