"""Reply adapter that posts back to the channel of the reacted message."""

from __future__ import annotations

from typing import Optional

from slack_sdk.web.async_client import AsyncWebClient


class SlackReply:
    """ReplyPort implementation addressing the reacting user."""

    def __init__(self, client: AsyncWebClient, channel_id: str, user_id: Optional[str]) -> None:
        self._client = client
        self._channel_id = channel_id
        self._user_id = user_id

    def _format(self, text: str) -> str:
        if not self._user_id:
            return text
        return f"<@{self._user_id}> {text}"

    async def reply(self, text: str) -> None:
        await self._client.chat_postMessage(channel=self._channel_id, text=self._format(text))
