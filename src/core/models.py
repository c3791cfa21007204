"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to Slack SDK payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

REACTION_ADDED = "reaction_added"
MESSAGE_ITEM = "message"


@dataclass(frozen=True)
class ReactionItem:
    """The item a reaction was attached to."""

    item_type: str
    channel_id: str
    timestamp: str


@dataclass(frozen=True)
class ReactionEvent:
    """Minimal reaction event used by the core pipeline."""

    type: str
    reaction_name: str
    item: ReactionItem
    user_id: Optional[str] = None

    @property
    def identity(self) -> "MessageIdentity":
        return MessageIdentity(self.item.channel_id, self.item.timestamp)


@dataclass(frozen=True)
class MessageIdentity:
    """(channel, timestamp) pair that uniquely identifies a Slack message."""

    channel_id: str
    timestamp: str

    def __str__(self) -> str:
        return f"{self.channel_id}:{self.timestamp}"


@dataclass(frozen=True)
class ReactionsResult:
    """Current state of a message as returned by reactions.get."""

    channel_id: str
    timestamp: str
    permalink: str
    reactions: tuple[str, ...]

    def has_reaction(self, name: str) -> bool:
        return name in self.reactions


@dataclass(frozen=True)
class IssueMetadata:
    """Fields used to build a new GitHub issue."""

    channel: str
    timestamp: str
    url: str
    date: datetime
    title: str
