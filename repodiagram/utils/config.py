"""Configuration loader and validator for repodiagram.

Loads settings from configs/config.yaml and provides typed, read-only
access to all configuration sections via frozen dataclasses. The
configuration is built once at startup and passed explicitly to the
scanner and the pipeline.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from repodiagram.errors import ConfigError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

OUTPUT_FORMATS = ("mermaid", "html")


@dataclass(frozen=True)
class APIConfig:
    """Configuration for the Anthropic API client."""

    provider: str = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 8192
    temperature: float = 0.2
    timeout: float = 300.0


@dataclass(frozen=True)
class ScannerConfig:
    """Extra exclusions layered on top of the built-in exclusion policy."""

    extra_exclude_dirs: tuple[str, ...] = ()
    extra_exclude_files: tuple[str, ...] = ()
    extra_exclude_extensions: tuple[str, ...] = ()
    use_gitignore: bool = True


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for diagram output."""

    default_format: str = "mermaid"
    include_click_events: bool = True
    html_title: str = "Architecture Diagram"


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    api: APIConfig = field(default_factory=APIConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(raw: dict, name: str) -> dict:
    """Return a named section of the raw config, validating its type.

    Args:
        raw: The parsed YAML document.
        name: Section key.

    Returns:
        The section mapping, or an empty dict if absent.

    Raises:
        ConfigError: If the section is present but not a mapping.
    """
    data = raw.get(name) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"config section '{name}' must be a mapping")
    return data


def _get(data: dict, section: str, key: str, default, kind: type):
    """Read a typed value from a config section.

    Integers are accepted where a float is expected. Booleans are never
    accepted as numbers.

    Raises:
        ConfigError: If the value has the wrong type.
    """
    value = data.get(key, default)
    if value is None and default is None:
        return None
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise ConfigError(
            f"config value '{section}.{key}' must be of type {kind.__name__}, "
            f"got {value!r}"
        )
    return value


def _get_names(data: dict, section: str, key: str) -> tuple[str, ...]:
    """Read a list of names from a config section.

    Raises:
        ConfigError: If the value is not a list of strings.
    """
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"config value '{section}.{key}' must be a list of strings")
    return tuple(value)


def _build_scanner_config(data: dict) -> ScannerConfig:
    """Build a ScannerConfig from a dictionary.

    Args:
        data: Dictionary with scanner settings.

    Returns:
        A configured ScannerConfig instance.
    """
    return ScannerConfig(
        extra_exclude_dirs=_get_names(data, "scanner", "extra_exclude_dirs"),
        extra_exclude_files=_get_names(data, "scanner", "extra_exclude_files"),
        extra_exclude_extensions=_get_names(data, "scanner", "extra_exclude_extensions"),
        use_gitignore=_get(data, "scanner", "use_gitignore", True, bool),
    )


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    Reads the YAML config file and constructs a fully typed AppConfig
    object. Falls back to defaults for any missing values. The API key
    is never read from the config file; it comes from the command line
    or the ANTHROPIC_API_KEY environment variable.

    Args:
        config_path: Path to the YAML config file. If None, uses the
            default path at configs/config.yaml.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ConfigError: If the file contains invalid YAML, a value of the
            wrong type or an unknown output format.
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.warning("Config file not found at %s, using defaults", path)
        return AppConfig()

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    logger.debug("Loaded configuration from %s", path)

    api_data = _section(raw, "api")
    api_config = APIConfig(
        provider=_get(api_data, "api", "provider", "anthropic", str),
        model=_get(api_data, "api", "model", "claude-sonnet-4-20250514", str),
        max_tokens=_get(api_data, "api", "max_tokens", 8192, int),
        temperature=_get(api_data, "api", "temperature", 0.2, float),
        timeout=_get(api_data, "api", "timeout", 300.0, float),
    )

    output_data = _section(raw, "output")
    output_config = OutputConfig(
        default_format=_get(output_data, "output", "default_format", "mermaid", str),
        include_click_events=_get(
            output_data, "output", "include_click_events", True, bool
        ),
        html_title=_get(output_data, "output", "html_title", "Architecture Diagram", str),
    )
    if output_config.default_format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"unknown output format: {output_config.default_format} "
            f"(supported: {', '.join(OUTPUT_FORMATS)})"
        )

    logging_data = _section(raw, "logging")
    logging_config = LoggingConfig(
        level=_get(logging_data, "logging", "level", "INFO", str),
        format=_get(
            logging_data,
            "logging",
            "format",
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            str,
        ),
        file=_get(logging_data, "logging", "file", None, str),
    )

    return AppConfig(
        api=api_config,
        scanner=_build_scanner_config(_section(raw, "scanner")),
        output=output_config,
        logging=logging_config,
    )
