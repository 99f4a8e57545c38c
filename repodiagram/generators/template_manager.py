"""Template manager for loading and rendering Jinja2 templates.

Provides a centralized interface for rendering the user prompts of the
three generation phases, and the HTML viewer page, from Jinja2
templates stored in the package's templates/ directory.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


class TemplateManager:
    """Loads and renders Jinja2 templates for diagram generation.

    Prompt templates are rendered verbatim; HTML templates are
    autoescaped so diagram text cannot inject markup.
    """

    def __init__(self, templates_dir: Optional[str] = None) -> None:
        """Initialize the template manager.

        Args:
            templates_dir: Path to the templates directory. Uses the
                bundled templates/ directory if not specified.
        """
        self._templates_path = (
            Path(templates_dir) if templates_dir else _DEFAULT_TEMPLATES_DIR
        )

        if not self._templates_path.exists():
            logger.warning("Templates directory not found: %s", self._templates_path)

        self._env = Environment(
            loader=FileSystemLoader(str(self._templates_path)),
            autoescape=select_autoescape(enabled_extensions=("html.j2",)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        logger.debug("Template manager initialized with: %s", self._templates_path)

    def render_explain_prompt(self, file_tree: str, readme: Optional[str] = None) -> str:
        """Render the phase 1 prompt.

        Args:
            file_tree: Newline-joined file tree listing.
            readme: README content, if the repository has one.

        Returns:
            Rendered prompt string ready for LLM submission.
        """
        return self._render("explain.j2", file_tree=file_tree, readme=readme)

    def render_mapping_prompt(self, explanation: str, file_tree: str) -> str:
        """Render the phase 2 prompt.

        Args:
            explanation: Text extracted from the phase 1 response.
            file_tree: Newline-joined file tree listing.

        Returns:
            Rendered prompt string ready for LLM submission.
        """
        return self._render("mapping.j2", explanation=explanation, file_tree=file_tree)

    def render_diagram_prompt(
        self,
        explanation: str,
        mapping: str,
        instructions: Optional[str] = None,
    ) -> str:
        """Render the phase 3 prompt.

        Args:
            explanation: Text extracted from the phase 1 response.
            mapping: Text extracted from the phase 2 response.
            instructions: Optional custom instructions from the user.

        Returns:
            Rendered prompt string ready for LLM submission.
        """
        return self._render(
            "diagram.j2",
            explanation=explanation,
            mapping=mapping,
            instructions=instructions,
        )

    def render_html_viewer(self, diagram: str, title: str) -> str:
        """Render a standalone HTML page displaying a Mermaid diagram.

        Args:
            diagram: Mermaid.js diagram code.
            title: Page title.

        Returns:
            The HTML document.
        """
        return self._render("viewer.html.j2", diagram=diagram, title=title)

    def _render(self, template_name: str, **kwargs: Any) -> str:
        """Render a template with the given context variables.

        Args:
            template_name: Name of the template file to render.
            **kwargs: Template context variables.

        Returns:
            Rendered template string.

        Raises:
            TemplateNotFound: If the template file does not exist.
        """
        template = self._env.get_template(template_name)
        rendered = template.render(**kwargs)
        logger.debug("Rendered template %s (%d chars)", template_name, len(rendered))
        return rendered
