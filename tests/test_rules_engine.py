from __future__ import annotations

import pytest

from core.rules_engine import Rule, build_rules, find_matching_rule

from helpers import CHANNEL_ID, FakeSlack, base_config, reaction_event


def test_rule_from_config_copies_declared_fields() -> None:
    rule = Rule.from_config({"reactionName": "evergreen_tree", "githubRepository": "hub", "channelNames": ["hub"]})
    assert rule.reaction_name == "evergreen_tree"
    assert rule.github_repository == "hub"
    assert rule.channel_names == frozenset({"hub"})


def test_rule_without_channel_names_matches_any_channel() -> None:
    rule = Rule.from_config({"reactionName": "evergreen_tree", "githubRepository": "handbook"})
    slack = FakeSlack(channel_name="anywhere")
    assert rule.channel_names is None
    assert rule.matches(reaction_event(), slack)
    # No channel restriction means no lookup.
    assert slack.channel_lookups == []


def test_rule_matches_listed_channel() -> None:
    rule = Rule("evergreen_tree", "handbook", frozenset({"handbook", "hub"}))
    slack = FakeSlack(channel_name="handbook")
    assert rule.matches(reaction_event(), slack)
    assert slack.channel_lookups == [CHANNEL_ID]


def test_rule_rejects_unlisted_channel() -> None:
    rule = Rule("evergreen_tree", "handbook", frozenset({"hub"}))
    assert not rule.matches(reaction_event(), FakeSlack(channel_name="handbook"))


def test_rule_rejects_other_reaction_without_resolving_channel() -> None:
    rule = Rule("evergreen_tree", "handbook", frozenset({"handbook"}))
    slack = FakeSlack()
    assert not rule.matches(reaction_event(reaction="sad-face"), slack)
    assert slack.channel_lookups == []


def test_empty_channel_names_match_nothing() -> None:
    rule = Rule.from_config({"reactionName": "evergreen_tree", "githubRepository": "handbook", "channelNames": []})
    assert rule.channel_names == frozenset()
    assert not rule.matches(reaction_event(), FakeSlack(channel_name="handbook"))


def test_rule_match_is_repeatable() -> None:
    rule = Rule("evergreen_tree", "handbook", frozenset({"handbook"}))
    slack = FakeSlack()
    event = reaction_event()
    assert rule.matches(event, slack) == rule.matches(event, slack)
    assert rule == Rule("evergreen_tree", "handbook", frozenset({"handbook"}))


def test_rule_str_lists_fields() -> None:
    assert str(Rule("evergreen_tree", "handbook")) == (
        "Rule { reactionName: 'evergreen_tree', githubRepository: 'handbook' }"
    )


def test_find_matching_rule_falls_through_to_unrestricted_rule() -> None:
    rules = build_rules(base_config()["rules"])
    slack = FakeSlack(channel_name="not-any-channel-from-any-config-rule")
    assert find_matching_rule(reaction_event(), rules, slack) is rules[-1]


def test_find_matching_rule_first_match_wins() -> None:
    rules = build_rules(base_config()["rules"])
    slack = FakeSlack(channel_name="handbook")
    assert find_matching_rule(reaction_event(), rules, slack) is rules[0]


def test_find_matching_rule_ignores_missing_event() -> None:
    assert find_matching_rule(None, build_rules(base_config()["rules"]), FakeSlack()) is None


def test_find_matching_rule_ignores_other_event_types() -> None:
    slack = FakeSlack()
    rules = build_rules(base_config()["rules"])
    assert find_matching_rule(reaction_event(event_type="hello"), rules, slack) is None
    assert find_matching_rule(reaction_event(item_type="file"), rules, slack) is None
    assert slack.channel_lookups == []


def test_find_matching_rule_returns_none_for_unknown_reaction() -> None:
    rules = build_rules(base_config()["rules"])
    assert find_matching_rule(reaction_event(reaction="sad-face"), rules, FakeSlack()) is None


def test_rule_from_config_rejects_bare_channel_name() -> None:
    with pytest.raises(ValueError, match="channelNames must be a list of strings"):
        Rule.from_config({"reactionName": "evergreen_tree", "githubRepository": "handbook", "channelNames": "handbook"})
