"""
Configuration management for wikichart.

Allowed domains come from a YAML file; scalar settings can be overridden with
``WIKICHART_*`` environment variables.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings


class LoaderSettings(BaseSettings):
    """Environment-level settings."""

    # Trusted graphs may use raw http/https URLs
    is_trusted: bool = False

    language_code: str | None = None
    default_domain: str | None = None

    # Transport Settings
    user_agent: str = "wikichart/1.0 (Graph data loader)"
    timeout: int = 30

    config_path: str = "wikichart.yaml"

    model_config = {"env_prefix": "WIKICHART_"}


@dataclass
class LoaderConfig:
    """Everything needed to build a GraphDataLoader.

    Attributes:
        domains: Protocol tag -> ordered list of allowed domain patterns
        domain_map: Host alias -> canonical host
        is_trusted: Allow raw http/https access
        language_code: Default language for tabular and map data
        default_domain: Host used when a descriptor names none
        user_agent: User-Agent header for the bundled transport
        timeout: Request timeout in seconds for the bundled transport
    """

    domains: dict[str, list[str]] = field(default_factory=dict)
    domain_map: dict[str, str] = field(default_factory=dict)
    is_trusted: bool = False
    language_code: str | None = None
    default_domain: str | None = None
    user_agent: str = "wikichart/1.0 (Graph data loader)"
    timeout: int = 30

    def __post_init__(self):
        """Validate domain tables."""
        if not isinstance(self.domains, dict):
            raise ValueError("domains must be a mapping of protocol to domain list")
        for protocol, patterns in self.domains.items():
            if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
                raise ValueError(f"domains.{protocol} must be a list of strings")
        if not isinstance(self.domain_map, dict):
            raise ValueError("domain_map must be a mapping of alias to host")


def load_config(path: str | Path | None = None, settings: LoaderSettings | None = None) -> LoaderConfig:
    """
    Load loader configuration from a YAML file.

    The file holds ``domains`` and ``domain_map`` tables and may also set any
    scalar option. Environment variables win over the file.

    Args:
        path: YAML file (defaults to ``settings.config_path``)
        settings: Environment settings (read from the environment if omitted)

    Returns:
        LoaderConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist
    """
    settings = settings or LoaderSettings()
    config_path = Path(path or settings.config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    options = {
        "is_trusted": data.get("is_trusted", False),
        "language_code": data.get("language_code"),
        "default_domain": data.get("default_domain"),
        "user_agent": data.get("user_agent", settings.user_agent),
        "timeout": data.get("timeout", settings.timeout),
    }
    # Only explicitly set environment variables override the file
    for name in settings.model_fields_set & options.keys():
        options[name] = getattr(settings, name)

    return LoaderConfig(
        domains=data.get("domains") or {},
        domain_map=data.get("domain_map") or {},
        **options,
    )
