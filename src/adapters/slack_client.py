"""Slack Web API adapter.

Satisfies the core SlackPort. Channel names and the team domain are cached
from ``team.info`` and ``conversations.list`` so lookups stay synchronous.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Optional

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from core.models import ReactionsResult

LOGGER = logging.getLogger(__name__)

CHANNEL_TYPES = "public_channel,private_channel"


class SlackClient:
    """Reaction reader/writer plus channel directory for one workspace."""

    def __init__(self, web_client: AsyncWebClient, success_reaction: str) -> None:
        self._client = web_client
        self.success_reaction = success_reaction
        self._channels: dict[str, str] = {}
        self._team_domain: Optional[str] = None

    @classmethod
    def build(cls, token: str, success_reaction: str, timeout_ms: int, base_url: str) -> "SlackClient":
        web_client = AsyncWebClient(token=token, base_url=base_url, timeout=max(1, round(timeout_ms / 1000)))
        return cls(web_client, success_reaction)

    @property
    def web_client(self) -> AsyncWebClient:
        return self._client

    async def _call(self, method: str, request: Awaitable[Any]) -> dict:
        try:
            response = await request
        except SlackApiError as e:
            error = e.response.get("error") if e.response is not None else str(e)
            raise RuntimeError(f"Slack API method {method} failed: {error}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            reason = str(e) or type(e).__name__
            raise RuntimeError(f"failed to make Slack API request for method {method}: {reason}") from e
        return response.data if isinstance(response.data, dict) else {}

    async def refresh(self) -> None:
        """Load the team domain and the channel directory."""

        team = await self._call("team.info", self._client.team_info())
        self._team_domain = team["team"]["domain"]

        channels: dict[str, str] = {}
        cursor = None
        while True:
            params: dict[str, Any] = {"types": CHANNEL_TYPES, "limit": 200, "exclude_archived": True}
            if cursor:
                params["cursor"] = cursor
            page = await self._call("conversations.list", self._client.conversations_list(**params))
            for channel in page.get("channels", []):
                channels[channel["id"]] = channel["name"]
            cursor = (page.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break
        self._channels = channels
        LOGGER.info("Loaded %s channels for team %s", len(channels), self._team_domain)

    def remember_channel(self, channel_id: str, name: str) -> None:
        self._channels[channel_id] = name

    def get_channel_name(self, channel_id: str) -> str:
        try:
            return self._channels[channel_id]
        except KeyError:
            raise RuntimeError(f"unknown Slack channel {channel_id}") from None

    def get_team_domain(self) -> str:
        if self._team_domain is None:
            raise RuntimeError("Slack team domain not loaded; call refresh() first")
        return self._team_domain

    async def get_reactions(self, channel_id: str, timestamp: str) -> ReactionsResult:
        data = await self._call(
            "reactions.get",
            self._client.reactions_get(channel=channel_id, timestamp=timestamp, full=True),
        )
        message = data.get("message") or {}
        return ReactionsResult(
            channel_id=data.get("channel", channel_id),
            timestamp=message.get("ts", timestamp),
            permalink=message.get("permalink", ""),
            reactions=tuple(reaction["name"] for reaction in message.get("reactions", [])),
        )

    async def add_success_reaction(self, channel_id: str, timestamp: str) -> None:
        await self._call(
            "reactions.add",
            self._client.reactions_add(channel=channel_id, timestamp=timestamp, name=self.success_reaction),
        )
