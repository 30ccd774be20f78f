"""
Configuration management for release-tool.

Settings are layered: dataclass defaults, then a JSON config file, then
environment variables. Command-line options are applied last by the CLI.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console

from .error_handling import ErrorCategory, get_error_handler

console = Console(stderr=True)

DEFAULT_TEMPLATE_FILE = "TEMPLATE"

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class GitConfig:
    """Where and how git is invoked."""

    repository: str = "."
    executable: str = "git"
    # Passed to every invocation as ``git -c key=value``
    configs: Dict[str, str] = field(default_factory=dict)


@dataclass
class OutputConfig:
    """Release notes rendering configuration."""

    template: str = DEFAULT_TEMPLATE_FILE
    linkify: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "WARNING"


@dataclass
class ReleaseToolConfig:
    """Main configuration containing all subsections."""

    git: GitConfig = field(default_factory=GitConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Global configuration instance
_global_config: Optional[ReleaseToolConfig] = None


def parse_git_configs(values: List[str]) -> Dict[str, str]:
    """
    Parse ``key=value`` pairs into a git config override mapping.

    Raises:
        ValueError: If an entry has no ``=`` or an empty key
    """
    configs: Dict[str, str] = {}
    for value in values:
        key, sep, setting = value.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"invalid git config override {value!r}, expected key=value")
        configs[key] = setting.strip()
    return configs


def validate_config_values(config: ReleaseToolConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    if not config.git.executable:
        errors.append("git.executable must not be empty")
    if not config.git.repository:
        errors.append("git.repository must not be empty")
    for key in config.git.configs:
        if not key or "=" in key:
            errors.append(f"git.configs has an invalid key: {key!r}")

    if not config.output.template:
        errors.append("output.template must not be empty")

    if config.logging.log_level.upper() not in _LOG_LEVELS:
        errors.append(
            f"logging.log_level must be one of {', '.join(_LOG_LEVELS)}"
        )

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from a JSON file."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"⚠️  Error loading config from {config_path}: {e}", style="yellow")
        return None

    if not isinstance(data, dict):
        console.print(
            f"⚠️  Config file {config_path} must contain a JSON object", style="yellow"
        )
        return None
    return data


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".release-tool.json",
        Path.home() / ".config" / "release-tool" / "config.json",
        Path.home() / ".release-tool.json",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ReleaseToolConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.environ.get(key, "").lower()
        return value in ["true", "1", "yes", "on"] if value else default

    if repository := os.environ.get("RELEASE_TOOL_REPOSITORY"):
        config.git.repository = repository
    if executable := os.environ.get("RELEASE_TOOL_GIT"):
        config.git.executable = executable
    if git_configs := os.environ.get("RELEASE_TOOL_GIT_CONFIG"):
        try:
            config.git.configs.update(
                parse_git_configs([item for item in git_configs.split(",") if item.strip()])
            )
        except ValueError as e:
            console.print(f"⚠️  Ignoring RELEASE_TOOL_GIT_CONFIG: {e}", style="yellow")
            get_error_handler().warning(
                ErrorCategory.CONFIGURATION,
                "invalid RELEASE_TOOL_GIT_CONFIG ignored",
                "cli_config",
                "load_environment_overrides",
                exception=e,
                suggestions=["Use comma separated key=value pairs"],
            )

    if template := os.environ.get("RELEASE_TOOL_TEMPLATE"):
        config.output.template = template
    config.output.linkify = get_env_bool("RELEASE_TOOL_LINKIFY", config.output.linkify)

    if log_level := os.environ.get("RELEASE_TOOL_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            if isinstance(getattr(config, key), dict) and isinstance(value, dict):
                getattr(config, key).update({str(k): str(v) for k, v in value.items()})
            else:
                setattr(config, key, value)
        else:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )


def load_config(config_file: Optional[Path] = None) -> ReleaseToolConfig:
    """Load configuration from file and environment."""
    global _global_config

    if _global_config is not None and config_file is None:
        return _global_config

    config = ReleaseToolConfig()

    config_file = config_file or find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if file_config:
            for section_name in ("git", "output", "logging"):
                if isinstance(file_config.get(section_name), dict):
                    apply_config_section(
                        getattr(config, section_name),
                        file_config[section_name],
                        section_name,
                    )

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        defaults = ReleaseToolConfig()
        if not config.git.executable:
            config.git.executable = defaults.git.executable
        if not config.git.repository:
            config.git.repository = defaults.git.repository
        if not config.output.template:
            config.output.template = defaults.output.template
        if config.logging.log_level.upper() not in _LOG_LEVELS:
            config.logging.log_level = defaults.logging.log_level

    _global_config = config
    return config


def get_config() -> ReleaseToolConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None


def create_sample_config() -> str:
    """Generate a sample configuration file."""
    sample_config = {
        "git": {
            "repository": ".",
            "executable": "git",
            "configs": {"core.abbrev": "12"},
        },
        "output": {
            "template": DEFAULT_TEMPLATE_FILE,
            "linkify": False,
        },
        "logging": {
            "log_level": "WARNING",
        },
    }

    return json.dumps(sample_config, indent=2)
