"""Slack Bolt listeners hosting the reaction processor.

This is the host boundary: nothing raised while matching or dispatching an
event escapes to Bolt, and the continuation is always awaited exactly once.
Listeners run after Bolt has acknowledged the event, so slow GitHub calls do
not trigger Slack redeliveries.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Any, Awaitable, Callable, Optional

from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from adapters.slack_client import SlackClient
from adapters.slack_mapper import build_reaction_event
from adapters.slack_reply import SlackReply
from core.errors import IssueFilingError
from core.models import ReactionEvent
from core.processor import ReactionProcessor

LOGGER = logging.getLogger(__name__)

NextCallable = Callable[[], Awaitable[None]]

CHANNEL_DIRECTORY_EVENTS = {"channel_created", "channel_rename"}


class ReactionListener:
    """Feeds reaction events through the ReactionProcessor."""

    def __init__(self, processor: ReactionProcessor, slack_client: SlackClient) -> None:
        self._processor = processor
        self._slack = slack_client

    def register(self, app: AsyncApp) -> None:
        @app.event("reaction_added")
        async def reaction_added(body: dict, client: AsyncWebClient) -> None:
            await self.handle(body, client)

        @app.event("channel_created")
        async def channel_created(body: dict) -> None:
            self._track_channels(body.get("event"))

        @app.event("channel_rename")
        async def channel_rename(body: dict) -> None:
            self._track_channels(body.get("event"))

        LOGGER.info("registered reaction listener")

    def _track_channels(self, raw: Optional[dict[str, Any]]) -> None:
        if not isinstance(raw, dict) or raw.get("type") not in CHANNEL_DIRECTORY_EVENTS:
            return
        channel = raw.get("channel")
        if isinstance(channel, dict) and channel.get("id") and channel.get("name"):
            self._slack.remember_channel(channel["id"], channel["name"])

    async def handle(self, body: dict, client: AsyncWebClient, next_: Optional[NextCallable] = None) -> None:
        next_ = next_ or _event_handled
        raw = body.get("event") if isinstance(body, dict) else None
        continuations: list[NextCallable] = []
        event: Optional[ReactionEvent] = None

        try:
            event = build_reaction_event(raw)
            reply = SlackReply(client, event.item.channel_id if event else "", event.user_id if event else None)
            task = self._processor.execute(event, reply, continuations.append, next_)
            if task is not None:
                # Pipeline failures have already been replied to and logged.
                with contextlib.suppress(IssueFilingError):
                    await task
        except Exception as err:
            LOGGER.exception("unhandled error: %s\nmessage: %s", err, json.dumps(raw, indent=2, default=str))
            if event is not None:
                await self._reply_unhandled(client, event, err)
        finally:
            # Cancellation skips the handlers above but not the continuation.
            if not continuations:
                continuations.append(next_)
            await continuations[0]()

    async def _reply_unhandled(self, client: AsyncWebClient, event: ReactionEvent, err: Exception) -> None:
        try:
            await SlackReply(client, event.item.channel_id, event.user_id).reply(f"unhandled error: {err}")
        except Exception:
            LOGGER.exception("Failed to report unhandled error for %s", event.identity)


async def _event_handled() -> None:
    LOGGER.debug("reaction event handled")
