"""Rule construction and matching logic (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional

from core.models import MESSAGE_ITEM, REACTION_ADDED, ReactionEvent

if TYPE_CHECKING:
    from core.ports import ChannelNameResolver


@dataclass(frozen=True)
class Rule:
    """Reaction-to-repository rule used by the pipeline.

    ``channel_names`` of ``None`` matches any channel, while an empty set
    matches none.
    """

    reaction_name: str
    github_repository: str
    channel_names: Optional[frozenset[str]] = None

    @classmethod
    def from_config(cls, rule: dict) -> "Rule":
        channel_names = rule.get("channelNames")
        # A bare string would otherwise become a set of its letters.
        if isinstance(channel_names, str):
            raise ValueError(f"channelNames must be a list of strings, got {channel_names!r}")
        return cls(
            reaction_name=rule["reactionName"],
            github_repository=rule["githubRepository"],
            channel_names=None if channel_names is None else frozenset(channel_names),
        )

    def matches(self, event: ReactionEvent, resolver: "ChannelNameResolver") -> bool:
        if event.reaction_name != self.reaction_name:
            return False
        if self.channel_names is None:
            return True
        return resolver.get_channel_name(event.item.channel_id) in self.channel_names

    def __str__(self) -> str:
        parts = [f"reactionName: '{self.reaction_name}'", f"githubRepository: '{self.github_repository}'"]
        if self.channel_names is not None:
            names = ", ".join(f"'{name}'" for name in sorted(self.channel_names))
            parts.append(f"channelNames: [{names}]")
        return "Rule { " + ", ".join(parts) + " }"


def build_rules(rules_config: Iterable[dict]) -> List[Rule]:
    """Build rules from validated config, keeping the configured order.

    Order matters: the first matching rule wins.
    """

    return [Rule.from_config(rule) for rule in rules_config]


def is_eligible(event: Optional[ReactionEvent]) -> bool:
    """Return True for reaction_added events on plain messages."""

    return event is not None and event.type == REACTION_ADDED and event.item.item_type == MESSAGE_ITEM


def find_matching_rule(
    event: Optional[ReactionEvent],
    rules: Iterable[Rule],
    resolver: "ChannelNameResolver",
) -> Optional[Rule]:
    """Return the first rule matching the event, or None.

    Ineligible events never reach rule evaluation, so the resolver is not
    consulted for them.
    """

    if not is_eligible(event):
        return None

    for rule in rules:
        if rule.matches(event, resolver):
            return rule
    return None
