"""CLI command for repodiagram.

Provides the Click-based ``repodiagram`` command, which scans a local
repository, runs the three-phase generation pipeline and writes the
resulting Mermaid diagram (or an HTML page showing it).
"""

import logging
import os
from dataclasses import replace
from typing import Optional

import click

from repodiagram import __version__
from repodiagram.errors import ConfigError, RepoDiagramError
from repodiagram.generators.llm_client import LLMClient
from repodiagram.generators.pipeline import PHASE_COUNT, DiagramGenerator
from repodiagram.output.html import to_html
from repodiagram.output.mermaid import remove_click_events, write_output
from repodiagram.scanner.exclusions import ExclusionPolicy
from repodiagram.scanner.file_tree import DirectoryScanner, find_readme
from repodiagram.utils.config import OUTPUT_FORMATS, AppConfig, load_config
from repodiagram.utils.logging import setup_logging

logger = logging.getLogger(__name__)

_API_KEY_ENV = "ANTHROPIC_API_KEY"


def _info(verbose: bool, message: str) -> None:
    if verbose:
        click.secho(message, fg="cyan", err=True)


def _build_policy(config: AppConfig) -> ExclusionPolicy:
    """Build the exclusion policy from the built-in tables and config extras.

    Args:
        config: Application configuration.

    Returns:
        The exclusion policy for this run.
    """
    return ExclusionPolicy.default().with_extras(
        dirs=config.scanner.extra_exclude_dirs,
        files=config.scanner.extra_exclude_files,
        extensions=config.scanner.extra_exclude_extensions,
    )


@click.command()
@click.version_option(version=__version__, prog_name="repodiagram")
@click.argument("path", type=click.Path(), default=".", required=False)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file (default: stdout).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default: mermaid).",
)
@click.option(
    "--instructions", "-i", default=None, help="Custom instructions for the diagram."
)
@click.option(
    "--api-key",
    default=None,
    help=f"Anthropic API key (or use the {_API_KEY_ENV} env var).",
)
@click.option("--model", default=None, help="Claude model to use.")
@click.option("--verbose", "-v", is_flag=True, help="Show generation progress.")
@click.option("--no-click", is_flag=True, help="Disable click events in output.")
@click.option("--stream", is_flag=True, help="Stream model responses as they arrive.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML config file.",
)
def repodiagram(
    path: str,
    output: Optional[str],
    output_format: Optional[str],
    instructions: Optional[str],
    api_key: Optional[str],
    model: Optional[str],
    verbose: bool,
    no_click: bool,
    stream: bool,
    config_path: Optional[str],
) -> None:
    """Generate architecture diagrams from local repositories.

    Analyzes the file structure and README of PATH (default: the current
    directory) and produces a Mermaid.js system design diagram.

    \b
    Examples:
      repodiagram                              # Current directory
      repodiagram ./my-project                 # Specific directory
      repodiagram -o diagram.mmd               # Output to file
      repodiagram -f html -o diagram.html      # HTML preview
      repodiagram -i "Focus on the API layer"  # Custom instructions
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(
        level="DEBUG" if verbose else config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
    )

    key = api_key or os.getenv(_API_KEY_ENV, "")
    if not key:
        raise click.UsageError(
            f"Anthropic API key required. Set the {_API_KEY_ENV} env var "
            "or use the --api-key flag."
        )

    if model:
        config = replace(config, api=replace(config.api, model=model))
    output_format = output_format or config.output.default_format

    _info(verbose, f"Scanning directory: {path}")
    try:
        scanner = DirectoryScanner(
            path,
            policy=_build_policy(config),
            use_gitignore=config.scanner.use_gitignore,
        )
        entries = scanner.collect()
    except RepoDiagramError as e:
        raise click.ClickException(f"failed to scan directory: {e}") from e
    file_tree = "\n".join(entries)
    _info(verbose, f"Found {len(entries)} entries in file tree")

    readme = find_readme(scanner.root)
    if readme is None:
        _info(verbose, "No README found, continuing without it")
    else:
        _info(verbose, f"Found README ({len(readme)} chars)")

    _info(verbose, f"Generating diagram using {config.api.model}...")

    def on_progress(phase: int, description: str) -> None:
        _info(verbose, f"  Phase {phase}/{PHASE_COUNT}: {description}...")

    def on_chunk(phase: int, chunk: str) -> None:
        if verbose:
            click.secho(chunk, nl=False, dim=True, err=True)

    llm = LLMClient(config=config.api, api_key=key)
    generator = DiagramGenerator(llm)
    try:
        if stream:
            result = generator.generate_streaming(
                file_tree,
                readme,
                instructions,
                on_progress=on_progress,
                on_chunk=on_chunk,
            )
        else:
            result = generator.generate(
                file_tree, readme, instructions, on_progress=on_progress
            )
    except RepoDiagramError as e:
        raise click.ClickException(f"failed to generate diagram: {e}") from e

    logger.info("Total token usage: %d", llm.total_usage.total_tokens)

    diagram = result.diagram
    if no_click or not config.output.include_click_events:
        diagram = remove_click_events(diagram)

    if output_format == "html":
        rendered = to_html(diagram, title=config.output.html_title)
    else:
        rendered = diagram

    if output:
        write_output(rendered, output)
        if verbose:
            click.secho(f"Diagram written to {output}", fg="green", err=True)
    else:
        click.echo(rendered)
