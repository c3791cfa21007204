"""Slack and GitHub client factory for slack-github-issues.

Secrets are read from the environment (or a local .env file) so they stay
out of the JSON config and the repository.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from slack_bolt.async_app import AsyncApp

from adapters.github_client import GitHubClient
from adapters.slack_client import SlackClient
from core.config import IssuesConfig

SECRET_ENV_VARS = ("SLACK_BOT_TOKEN", "SLACK_APP_TOKEN", "GITHUB_TOKEN")
REDACTION_MASK = "***"


def secret_values(redact_cfg: Optional[dict] = None) -> list[str]:
    """Return the secret values to mask in log output, longest first.

    ``redact_cfg`` is the ``logging.redact`` config section. Redaction is on
    unless ``enabled`` is false; ``patterns`` names the environment variables
    to mask and defaults to the bot's own tokens.
    """

    redact_cfg = redact_cfg or {}
    if not redact_cfg.get("enabled", True):
        return []
    names = redact_cfg.get("patterns") or SECRET_ENV_VARS
    values = {os.getenv(name) for name in names}
    return sorted((value for value in values if value), key=len, reverse=True)


@dataclass(frozen=True)
class Credentials:
    slack_bot_token: str
    slack_app_token: str
    github_token: str


def load_credentials() -> Credentials:
    """Read tokens via python-dotenv, failing fast when any is missing."""

    load_dotenv()
    values = {name: os.getenv(name) for name in SECRET_ENV_VARS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise RuntimeError(f"Missing {', '.join(missing)} in environment")
    return Credentials(
        slack_bot_token=values["SLACK_BOT_TOKEN"],
        slack_app_token=values["SLACK_APP_TOKEN"],
        github_token=values["GITHUB_TOKEN"],
    )


def build_slack_client(config: IssuesConfig, credentials: Credentials) -> SlackClient:
    return SlackClient.build(
        token=credentials.slack_bot_token,
        success_reaction=config.success_reaction,
        timeout_ms=config.slack_timeout,
        base_url=config.slack_api_base_url,
    )


def build_github_client(config: IssuesConfig, credentials: Credentials) -> GitHubClient:
    return GitHubClient(
        user=config.github_user,
        token=credentials.github_token,
        timeout_ms=config.github_timeout,
        base_url=config.github_api_base_url,
    )


def build_app(slack_client: SlackClient) -> AsyncApp:
    """Create the Bolt app sharing the Slack client's web client."""

    logging.getLogger(__name__).info("Initializing Slack app")
    return AsyncApp(client=slack_client.web_client)
