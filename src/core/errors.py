"""Pipeline errors.

Every error raised out of a pipeline run has already been replied to and
logged, so hosts only need to swallow ``IssueFilingError``.
"""

from __future__ import annotations


class IssueFilingError(RuntimeError):
    """Base class for reported pipeline outcomes other than success."""


class AlreadyInProgressError(IssueFilingError):
    """Another pipeline run for the same message has not settled yet."""


class AlreadyProcessedError(IssueFilingError):
    """The message already carries the success reaction."""


class PipelineStageError(IssueFilingError):
    """Fetching reactions or filing the issue failed."""


class IssueCreatedButUnmarkedError(IssueFilingError):
    """The issue exists but the success reaction could not be added."""

    def __init__(self, message: str, issue_url: str) -> None:
        super().__init__(message)
        self.issue_url = issue_url
