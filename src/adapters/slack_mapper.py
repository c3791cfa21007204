"""Slack-to-core event mapping adapter.

This keeps Slack payload details out of the core pipeline.
"""

from __future__ import annotations

from typing import Any, Optional

from core.models import ReactionEvent, ReactionItem


def build_reaction_event(raw: Optional[dict[str, Any]]) -> Optional[ReactionEvent]:
    """Build a core ReactionEvent from a Slack Events API payload.

    Returns None for payloads that are not reaction events at all, so the
    core treats them as ineligible.
    """

    if not isinstance(raw, dict):
        return None
    item = raw.get("item")
    if not isinstance(item, dict) or "reaction" not in raw:
        return None

    return ReactionEvent(
        type=str(raw.get("type", "")),
        reaction_name=str(raw["reaction"]),
        item=ReactionItem(
            item_type=str(item.get("type", "")),
            channel_id=str(item.get("channel", "")),
            timestamp=str(item.get("ts", "")),
        ),
        user_id=raw.get("user"),
    )
