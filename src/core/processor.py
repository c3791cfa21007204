"""Core reaction processing pipeline.

This module is integration-agnostic. It only relies on ports for Slack,
GitHub and replies, enabling other hosts or adapters without changes here.

A matched reaction runs three stages strictly in order:
1) Fetch the message's current reactions (skip if already marked)
2) File a GitHub issue linking back to the message
3) Add the success reaction to the message

Every run ends with exactly one reply, a cleared registry entry, and one
call to the host continuation, in that order.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Callable, Optional

from core.config import IssuesConfig
from core.errors import (
    AlreadyInProgressError,
    AlreadyProcessedError,
    IssueCreatedButUnmarkedError,
    PipelineStageError,
)
from core.logging_utils import CorrelationLogger
from core.models import IssueMetadata, MessageIdentity, ReactionEvent, ReactionsResult
from core.ports import IssueFilerPort, LoggerPort, ReplyPort, SlackPort
from core.registry import InFlightRegistry
from core.rules_engine import Rule, find_matching_rule

LOGGER = logging.getLogger(__name__)

ALREADY_IN_PROGRESS = "already in progress"

NextHandler = Callable[[Any], Any]


class ReactionProcessor:
    """Orchestrates rule matching, de-duplication, issue filing and replies."""

    def __init__(
        self,
        config: IssuesConfig,
        slack_client: SlackPort,
        github_client: IssueFilerPort,
        logger: Optional[LoggerPort] = None,
        registry: Optional[InFlightRegistry] = None,
    ) -> None:
        self._rules = list(config.rules)
        self._success_reaction = config.success_reaction
        self._slack = slack_client
        self._github = github_client
        self._logger = logger or CorrelationLogger(LOGGER)
        self._registry = registry if registry is not None else InFlightRegistry()

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    @property
    def registry(self) -> InFlightRegistry:
        return self._registry

    def find_matching_rule(self, event: Optional[ReactionEvent]) -> Optional[Rule]:
        return find_matching_rule(event, self._rules, self._slack)

    def parse_metadata(self, result: ReactionsResult) -> IssueMetadata:
        """Build the issue title and link from a reactions.get result."""

        channel = self._slack.get_channel_name(result.channel_id)
        date = datetime.fromtimestamp(float(result.timestamp), tz=timezone.utc)
        return IssueMetadata(
            channel=channel,
            timestamp=result.timestamp,
            url=result.permalink,
            date=date,
            title=f"Update from #{channel} at {format_datetime(date, usegmt=True)}",
        )

    def execute(
        self,
        event: Optional[ReactionEvent],
        response: ReplyPort,
        next_handler: NextHandler,
        done: Any = None,
    ) -> Optional["asyncio.Task[str]"]:
        """Run the pipeline for ``event`` if a rule matches.

        Returns None after calling ``next_handler(done)`` when nothing
        matches. Otherwise returns a task that resolves to the new issue URL
        or raises an ``IssueFilingError`` that has already been reported.
        Must be called from a running event loop when a rule matches.
        """

        rule = self.find_matching_rule(event)
        if rule is None:
            next_handler(done)
            return None

        identity = event.identity
        self._logger.info(identity, "matches rule:", rule)

        # The mark must happen before any await so that a second event for
        # the same message observes it.
        if not self._registry.begin(identity):
            coro = self._reject_duplicate(identity, response, next_handler, done)
            release = False
        else:
            coro = self._run(rule, event, identity, response, next_handler, done)
            release = True

        try:
            return asyncio.create_task(coro)
        except RuntimeError:
            coro.close()
            if release:
                self._registry.finish(identity)
            raise

    async def _run(
        self,
        rule: Rule,
        event: ReactionEvent,
        identity: MessageIdentity,
        response: ReplyPort,
        next_handler: NextHandler,
        done: Any,
    ) -> str:
        try:
            reactions = await self._get_reactions(identity, event)
            issue_url = await self._file_issue(identity, reactions, rule.github_repository)
            await self._add_success_reaction(identity, event, issue_url)
        except AlreadyProcessedError as err:
            await self._finish(identity, response, next_handler, done, str(err))
            raise
        except IssueCreatedButUnmarkedError as err:
            await self._finish(identity, response, next_handler, done, str(err), failed=True)
            raise
        except asyncio.CancelledError:
            self._registry.finish(identity)
            next_handler(done)
            raise
        except Exception as err:
            message = f"failed to create a GitHub issue in {self._github.user}/{rule.github_repository}: {err}"
            await self._finish(identity, response, next_handler, done, message, failed=True)
            raise PipelineStageError(message) from err

        await self._finish(identity, response, next_handler, done, f"created: {issue_url}")
        return issue_url

    async def _get_reactions(self, identity: MessageIdentity, event: ReactionEvent) -> ReactionsResult:
        item = event.item
        domain = self._slack.get_team_domain()
        channel_name = self._slack.get_channel_name(item.channel_id)
        permalink = f"https://{domain}.slack.com/archives/{channel_name}/p{item.timestamp.replace('.', '')}"

        self._logger.info(identity, "getting reactions for", permalink)
        result = await self._slack.get_reactions(item.channel_id, item.timestamp)
        # Any existing success reaction counts, whoever added it.
        if result.has_reaction(self._success_reaction):
            raise AlreadyProcessedError(f"already processed {result.permalink}")
        return result

    async def _file_issue(self, identity: MessageIdentity, reactions: ReactionsResult, repository: str) -> str:
        metadata = self.parse_metadata(reactions)
        self._logger.info(identity, "making GitHub request for", metadata.url)
        return await self._github.file_new_issue(metadata, repository)

    async def _add_success_reaction(self, identity: MessageIdentity, event: ReactionEvent, issue_url: str) -> None:
        self._logger.info(identity, "adding", self._success_reaction)
        try:
            await self._slack.add_success_reaction(event.item.channel_id, event.item.timestamp)
        except Exception as err:
            raise IssueCreatedButUnmarkedError(
                f"created {issue_url} but failed to add {self._success_reaction}: {err}",
                issue_url,
            ) from err

    async def _reject_duplicate(
        self,
        identity: MessageIdentity,
        response: ReplyPort,
        next_handler: NextHandler,
        done: Any,
    ) -> str:
        # The running pipeline owns the registry entry; leave it alone.
        await self._finish(identity, response, next_handler, done, ALREADY_IN_PROGRESS, release=False)
        raise AlreadyInProgressError(ALREADY_IN_PROGRESS)

    async def _finish(
        self,
        identity: MessageIdentity,
        response: ReplyPort,
        next_handler: NextHandler,
        done: Any,
        message: str,
        failed: bool = False,
        release: bool = True,
    ) -> None:
        if failed:
            self._logger.error(identity, message)
            reply = f"Error: {message}"
        else:
            self._logger.info(identity, message)
            reply = message

        try:
            await response.reply(reply)
        except Exception:
            LOGGER.exception("%s: failed to send reply", identity)

        if release:
            self._registry.finish(identity)
        next_handler(done)
