"""Shared fixtures-as-functions and fakes for the test suite."""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Optional

from core.config import IssuesConfig
from core.models import REACTION_ADDED, IssueMetadata, ReactionEvent, ReactionItem, ReactionsResult

REACTION = "evergreen_tree"
USER_ID = "U5150OU812"
CHANNEL_ID = "C5150OU812"
TIMESTAMP = "1360782804.083113"
PERMALINK = "https://18f.slack.com/archives/handbook/p1360782804083113"
ISSUE_URL = "https://issues.example/handbook/1"
MESSAGE_ID = f"{CHANNEL_ID}:{TIMESTAMP}"
SUCCESS_REACTION = "heavy_check_mark"

_BASE_CONFIG = {
    "githubUser": "18F",
    "githubTimeout": 5000,
    "slackTimeout": 5000,
    "successReaction": SUCCESS_REACTION,
    "rules": [
        {"reactionName": "evergreen_tree", "githubRepository": "handbook", "channelNames": ["handbook"]},
        {"reactionName": "smiley", "githubRepository": "hub", "channelNames": ["hub"]},
        {"reactionName": "evergreen_tree", "githubRepository": "handbook"},
    ],
}


def base_config() -> dict:
    return copy.deepcopy(_BASE_CONFIG)


def issues_config(raw: Optional[dict] = None) -> IssuesConfig:
    return IssuesConfig.from_dict(raw or base_config())


def reaction_event(
    *,
    reaction: str = REACTION,
    event_type: str = REACTION_ADDED,
    item_type: str = "message",
    channel_id: str = CHANNEL_ID,
    timestamp: str = TIMESTAMP,
) -> ReactionEvent:
    return ReactionEvent(
        type=event_type,
        reaction_name=reaction,
        item=ReactionItem(item_type=item_type, channel_id=channel_id, timestamp=timestamp),
        user_id=USER_ID,
    )


def raw_reaction_event(reaction: str = REACTION) -> dict:
    return {
        "type": REACTION_ADDED,
        "user": USER_ID,
        "item": {"type": "message", "channel": CHANNEL_ID, "ts": TIMESTAMP},
        "reaction": reaction,
        "event_ts": TIMESTAMP,
    }


class FakeSlack:
    """In-memory SlackPort with call recording and an optional gate."""

    def __init__(
        self,
        *,
        channel_name: str = "handbook",
        domain: str = "18f",
        reactions: tuple[str, ...] = (),
        get_error: Optional[Exception] = None,
        add_error: Optional[Exception] = None,
    ) -> None:
        self.channel_name = channel_name
        self.domain = domain
        self.reactions = reactions
        self.get_error = get_error
        self.add_error = add_error
        self.channel_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.channel_lookups: list[str] = []
        self.get_calls: list[tuple[str, str]] = []
        self.add_calls: list[tuple[str, str]] = []

    def get_channel_name(self, channel_id: str) -> str:
        self.channel_lookups.append(channel_id)
        if self.channel_error is not None:
            raise self.channel_error
        return self.channel_name

    def get_team_domain(self) -> str:
        return self.domain

    async def get_reactions(self, channel_id: str, timestamp: str) -> ReactionsResult:
        self.get_calls.append((channel_id, timestamp))
        if self.gate is not None:
            await self.gate.wait()
        if self.get_error is not None:
            raise self.get_error
        return ReactionsResult(
            channel_id=channel_id,
            timestamp=timestamp,
            permalink=PERMALINK,
            reactions=tuple(self.reactions),
        )

    async def add_success_reaction(self, channel_id: str, timestamp: str) -> None:
        self.add_calls.append((channel_id, timestamp))
        if self.add_error is not None:
            raise self.add_error


class FakeGitHub:
    def __init__(self, issue_url: str = ISSUE_URL, error: Optional[Exception] = None) -> None:
        self.user = "18F"
        self.issue_url = issue_url
        self.error = error
        self.calls: list[tuple[IssueMetadata, str]] = []

    async def file_new_issue(self, metadata: IssueMetadata, repository: str) -> str:
        self.calls.append((metadata, repository))
        if self.error is not None:
            raise self.error
        return self.issue_url


class FakeReply:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.replies: list[str] = []
        self.error = error

    async def reply(self, text: str) -> None:
        self.replies.append(text)
        if self.error is not None:
            raise self.error


class Continuation:
    """Records each ``next_handler(done)`` call."""

    def __init__(self) -> None:
        self.calls: list[Any] = []

    def __call__(self, done: Any) -> None:
        self.calls.append(done)
