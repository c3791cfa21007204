"""Core configuration dataclasses.

We keep config parsing outside the core (see settings.py), but these
dataclasses define the shape the core expects so adapters and app layers can
build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.rules_engine import Rule, build_rules

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com/"
DEFAULT_SLACK_API_BASE_URL = "https://slack.com/api/"


@dataclass(frozen=True)
class IssuesConfig:
    """Validated settings for the reaction-to-issue pipeline.

    Timeouts are in milliseconds, matching the JSON config file.
    """

    github_user: str
    github_timeout: int
    slack_timeout: int
    success_reaction: str
    rules: tuple[Rule, ...]
    github_api_base_url: str = DEFAULT_GITHUB_API_BASE_URL
    slack_api_base_url: str = DEFAULT_SLACK_API_BASE_URL
    logging: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config: dict) -> "IssuesConfig":
        """Copy only the declared fields from an already validated dict."""

        return cls(
            github_user=config["githubUser"],
            github_timeout=int(config["githubTimeout"]),
            slack_timeout=int(config["slackTimeout"]),
            success_reaction=config["successReaction"],
            rules=tuple(build_rules(config["rules"])),
            github_api_base_url=_with_trailing_slash(config.get("githubApiBaseUrl"), DEFAULT_GITHUB_API_BASE_URL),
            slack_api_base_url=_with_trailing_slash(config.get("slackApiBaseUrl"), DEFAULT_SLACK_API_BASE_URL),
            logging=dict(config.get("logging") or {}),
        )


def _with_trailing_slash(url: Optional[str], default: str) -> str:
    if not url:
        return default
    return url if url.endswith("/") else f"{url}/"
