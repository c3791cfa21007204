"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the Slack and GitHub adapters so that
the core can be reused with different backends or fakes in tests.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from core.models import IssueMetadata, ReactionsResult


class ChannelNameResolver(Protocol):
    def get_channel_name(self, channel_id: str) -> str:
        ...


class TeamDomainProvider(Protocol):
    def get_team_domain(self) -> str:
        ...


class SlackPort(ChannelNameResolver, TeamDomainProvider, Protocol):
    """Slack operations required by the core pipeline."""

    async def get_reactions(self, channel_id: str, timestamp: str) -> ReactionsResult:
        ...

    async def add_success_reaction(self, channel_id: str, timestamp: str) -> None:
        ...


class IssueFilerPort(Protocol):
    """Issue tracker operations required by the core pipeline."""

    user: str

    async def file_new_issue(self, metadata: IssueMetadata, repository: str) -> str:
        ...


class ReplyPort(Protocol):
    """Replies to the conversation where the reaction was added."""

    async def reply(self, text: str) -> None:
        ...


class LoggerPort(Protocol):
    def info(self, correlation_id: Optional[Any], *parts: Any) -> None:
        ...

    def error(self, correlation_id: Optional[Any], *parts: Any) -> None:
        ...
