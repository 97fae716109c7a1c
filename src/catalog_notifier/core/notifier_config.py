"""
Subscription configuration (eventcatalog.notifier.yml).

Example YAML format:
    version: 1.0.0
    eventcatalog_url: https://catalog.example.com
    match_policy: interest
    owners:
      payments-team:
        events:
          - consumer-added
        channels:
          - type: slack
            webhook: ${SLACK_WEBHOOK_URL}
            headers:
              Authorization: Bearer ${SLACK_TOKEN}

``${VAR}`` tokens are substituted from the environment before the YAML is
parsed. A token left unresolved in a webhook URL or header value is fatal.
"""

import logging
import os
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

CATALOG_MARKER_FILES = (
    "eventcatalog.config.js",
    "eventcatalog.config.ts",
    "eventcatalog.config.mjs",
    "eventcatalog.config.cjs",
)


class MatchPolicy(str, Enum):
    """
    How subscribers are matched to notifications.

    INTEREST: the subscriber listed the notification kind.
    OWNERSHIP: as INTEREST, and the subscriber also owns the affected resource.
    """

    INTEREST = "interest"
    OWNERSHIP = "ownership"


class Channel(BaseModel):
    """A webhook delivery target."""

    model_config = ConfigDict(frozen=True)

    type: str = "slack"
    webhook: str
    headers: Dict[str, str] = Field(default_factory=dict)


class Subscriber(BaseModel):
    """A team interested in some notification kinds."""

    model_config = ConfigDict(frozen=True)

    events: List[str] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=list)


class SubscriptionConfig(BaseModel):
    """Parsed notifier configuration, immutable for the duration of a run."""

    model_config = ConfigDict(frozen=True)

    version: str = "1.0.0"
    eventcatalog_url: str = ""
    match_policy: MatchPolicy = MatchPolicy.INTEREST
    owners: Dict[str, Subscriber] = Field(default_factory=dict)

    @property
    def catalog_url(self) -> str:
        return self.eventcatalog_url.rstrip("/")


def substitute_env_vars(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Replace ${VAR} tokens with environment values; unknown ones are left as is."""
    env = os.environ if environ is None else environ

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        return env.get(name, match.group(0))

    return ENV_PLACEHOLDER.sub(_replace, text)


def find_unresolved_placeholders(config: SubscriptionConfig) -> List[str]:
    """List "<subscriber>: <token>" entries for placeholders left in channels."""
    problems = []
    for name, subscriber in config.owners.items():
        for channel in subscriber.channels:
            values = [channel.webhook, *channel.headers.values()]
            for value in values:
                for token in ENV_PLACEHOLDER.findall(value):
                    problems.append(f"{name}: ${{{token}}}")
    return problems


def parse_config(text: str, environ: Optional[Mapping[str, str]] = None) -> SubscriptionConfig:
    """
    Parse and validate a notifier configuration document.

    Raises:
        ConfigError: On invalid YAML, schema errors or unresolved placeholders
    """
    try:
        data = yaml.safe_load(substitute_env_vars(text, environ))
    except yaml.YAMLError as e:
        raise ConfigError(
            "Invalid notifier configuration",
            f"The configuration file is not valid YAML: {e}",
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            "Invalid notifier configuration",
            "The configuration file must contain a mapping at the top level.",
        )
    # "owners:" with no entries parses to None
    if data.get("owners") is None:
        data["owners"] = {}

    try:
        config = SubscriptionConfig(**data)
    except ValidationError as e:
        raise ConfigError(
            "Invalid notifier configuration",
            str(e),
            ["Check the configuration against the documented format"],
        ) from e

    unresolved = find_unresolved_placeholders(config)
    if unresolved:
        raise ConfigError(
            "Unresolved environment variables in configuration",
            "Some channel webhooks or headers reference environment variables that are not set.",
            [f"• {item}" for item in unresolved]
            + ["", "Export the missing variables before running the notifier."],
        )

    return config


def load_config(
    path: Union[str, Path],
    environ: Optional[Mapping[str, str]] = None,
) -> SubscriptionConfig:
    """
    Load the notifier configuration from a YAML file.

    Args:
        path: Path to the configuration file
        environ: Environment used for ${VAR} substitution (default: os.environ)

    Returns:
        Validated SubscriptionConfig

    Raises:
        ConfigError: If the file is missing or invalid
    """
    filepath = Path(path)
    if not filepath.is_file():
        raise ConfigError(
            "Notifier configuration not found",
            f"Could not read configuration file: {filepath}",
            ["Create the file or point --config at an existing one"],
        )

    with open(filepath, "r", encoding="utf-8") as f:
        text = f.read()

    config = parse_config(text, environ)
    logger.info(
        f"Loaded notifier config from {filepath} "
        f"({len(config.owners)} subscriber(s), policy={config.match_policy.value})"
    )
    return config


def validate_catalog_directory(catalog_path: Union[str, Path]) -> Path:
    """
    Check that catalog_path is an EventCatalog directory.

    Raises:
        ConfigError: If the directory or its config marker file is missing
    """
    path = Path(catalog_path)
    if not path.is_dir():
        raise ConfigError(
            "EventCatalog directory does not exist",
            f"Directory not found: {path}",
            ["Pass the catalog location with --catalog <path>"],
        )

    if not any((path / marker).is_file() for marker in CATALOG_MARKER_FILES):
        raise ConfigError(
            "EventCatalog configuration file not found",
            f"No {CATALOG_MARKER_FILES[0]} found in {path}",
            ["Make sure you're pointing to a valid EventCatalog directory"],
        )

    return path
