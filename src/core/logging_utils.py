"""Logger that prefixes every line with a message correlation id."""

from __future__ import annotations

import logging
from typing import Any, Optional


class CorrelationLogger:
    """Thin wrapper over a stdlib logger.

    ``info("C123:1360782804.083113", "adding", "evergreen_tree")`` logs
    ``C123:1360782804.083113: adding evergreen_tree``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("slack_github_issues")

    @staticmethod
    def _format(correlation_id: Optional[Any], parts: tuple[Any, ...]) -> str:
        text = " ".join(str(part) for part in parts)
        if correlation_id is None:
            return text
        return f"{correlation_id}: {text}"

    def info(self, correlation_id: Optional[Any], *parts: Any) -> None:
        self._logger.info("%s", self._format(correlation_id, parts))

    def error(self, correlation_id: Optional[Any], *parts: Any) -> None:
        self._logger.error("%s", self._format(correlation_id, parts))
