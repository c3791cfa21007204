"""Configuration loading for slack-github-issues.

All user-editable settings (rules, success reaction, API timeouts, logging)
live in a single JSON file for quick edits without touching Python. Secrets
stay in the environment (see client.py).
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from core.config import IssuesConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Environment variable overriding the config file location.
CONFIG_PATH_ENV = "SLACK_GITHUB_ISSUES_CONFIG_PATH"
DEFAULT_CONFIG_PATH = os.path.join("config", "slack-github-issues.json")

REQUIRED_TOP_LEVEL_FIELDS = {
    "githubUser": "GitHub username",
    "githubTimeout": "GitHub API timeout limit in milliseconds",
    "slackTimeout": "Slack API timeout limit in milliseconds",
    "successReaction": "emoji used to indicate an issue was successfully filed",
    "rules": "Slack-reaction-to-GitHub-issue rules",
}
OPTIONAL_TOP_LEVEL_FIELDS = {
    "githubApiBaseUrl": "Alternate base URL for GitHub API requests",
    "slackApiBaseUrl": "Alternate base URL for Slack API requests",
    "logging": "Logging settings (console, rotating file, secret redaction)",
}
REQUIRED_RULES_FIELDS = {
    "reactionName": "name of the reaction emoji triggering the rule",
    "githubRepository": "GitHub repository to which to post issues",
}
OPTIONAL_RULES_FIELDS = {
    "channelNames": "names of the Slack channels triggering the rules; "
    "leave undefined to match messages in any Slack channel",
}

LOGGER = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when the config file cannot be read or fails validation."""


def config_path() -> str:
    """Return the configured path, resolving relative paths from the project root."""

    path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    return path


def _missing_fields(entry: dict, required: dict) -> list[str]:
    return [name for name in required if name not in entry]


def _unknown_fields(entry: dict, required: dict, optional: dict) -> list[str]:
    return [name for name in entry if name not in required and name not in optional]


def _is_string(value: object) -> bool:
    return isinstance(value, str)


def _is_positive_integer(value: object) -> bool:
    # bool is an int subclass; JSON true/false is not a timeout.
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_list(value: object) -> bool:
    return isinstance(value, list)


def _is_object(value: object) -> bool:
    return isinstance(value, dict)


def _is_string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


TOP_LEVEL_FIELD_TYPES = {
    "githubUser": (_is_string, "a string"),
    "githubTimeout": (_is_positive_integer, "a positive integer"),
    "slackTimeout": (_is_positive_integer, "a positive integer"),
    "successReaction": (_is_string, "a string"),
    "rules": (_is_list, "a list"),
    "githubApiBaseUrl": (_is_string, "a string"),
    "slackApiBaseUrl": (_is_string, "a string"),
    "logging": (_is_object, "an object"),
}
RULES_FIELD_TYPES = {
    "reactionName": (_is_string, "a string"),
    "githubRepository": (_is_string, "a string"),
    "channelNames": (_is_string_list, "a list of strings"),
}


def _type_errors(entry: dict, field_types: dict) -> list[str]:
    return [
        f"{name} must be {description}"
        for name, (check, description) in field_types.items()
        if name in entry and not check(entry[name])
    ]


def validate_config(config: dict) -> None:
    """Raise ConfigurationError listing every problem with ``config``.

    Problems are reported in a fixed order: missing and unknown top-level
    fields, top-level values of the wrong type, then per rule missing
    fields, unknown fields and values of the wrong type.
    """

    if not isinstance(config, dict):
        raise ConfigurationError("Invalid configuration:\n  top level must be a JSON object")

    errors: list[str] = []
    errors.extend(f"missing {name}" for name in _missing_fields(config, REQUIRED_TOP_LEVEL_FIELDS))
    errors.extend(
        f"unknown property {name}"
        for name in _unknown_fields(config, REQUIRED_TOP_LEVEL_FIELDS, OPTIONAL_TOP_LEVEL_FIELDS)
    )
    errors.extend(_type_errors(config, TOP_LEVEL_FIELD_TYPES))

    rules = config.get("rules")
    if isinstance(rules, list):
        for index, rule in enumerate(rules):
            if not isinstance(rule, dict):
                errors.append(f"rule {index} must be an object")
                continue
            errors.extend(f"rule {index} missing {name}" for name in _missing_fields(rule, REQUIRED_RULES_FIELDS))
        for index, rule in enumerate(rules):
            if not isinstance(rule, dict):
                continue
            errors.extend(
                f"rule {index} contains unknown property {name}"
                for name in _unknown_fields(rule, REQUIRED_RULES_FIELDS, OPTIONAL_RULES_FIELDS)
            )
        for index, rule in enumerate(rules):
            if isinstance(rule, dict):
                errors.extend(f"rule {index} {error}" for error in _type_errors(rule, RULES_FIELD_TYPES))

    if errors:
        raise ConfigurationError("Invalid configuration:\n  " + "\n  ".join(errors))


def _read_json(path: str) -> dict:
    error_prefix = f"failed to load configuration from {path}: "
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as err:
        raise ConfigurationError(f"{error_prefix}invalid JSON: {err}") from err
    except OSError as err:
        raise ConfigurationError(f"{error_prefix}{err}") from err


def load_raw_config(path: Optional[str] = None) -> dict:
    """Read and validate the JSON config, returning the plain dict."""

    path = path or config_path()
    LOGGER.info("reading configuration from %s", path)
    raw = _read_json(path)
    validate_config(raw)
    return raw


def load_config(path: Optional[str] = None) -> IssuesConfig:
    """Load, validate and convert the config file."""

    return IssuesConfig.from_dict(load_raw_config(path))
