"""GitHub REST API adapter for filing issues.

Satisfies the core IssueFilerPort. The base URL is fixed at construction so
tests can point it at a local stub server.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request
from typing import Optional
from urllib.parse import quote

from core.config import DEFAULT_GITHUB_API_BASE_URL
from core.models import IssueMetadata

USER_AGENT = "slack-github-issues/0.1.0"


class GitHubClient:
    """Files issues under ``<user>/<repository>`` via the REST API."""

    def __init__(
        self,
        user: str,
        token: Optional[str],
        timeout_ms: int,
        base_url: str = DEFAULT_GITHUB_API_BASE_URL,
    ) -> None:
        self.user = user
        self._token = token
        self._timeout = timeout_ms / 1000.0
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"

    def _endpoint(self, repository: str) -> str:
        return f"{self._base_url}repos/{quote(self.user)}/{quote(repository)}/issues"

    def _build_request(self, metadata: IssueMetadata, repository: str) -> urllib.request.Request:
        payload = {"title": metadata.title, "body": metadata.url}
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(repository), data=data, method="POST")
        request.add_header("Accept", "application/vnd.github.v3+json")
        request.add_header("Content-Type", "application/json")
        request.add_header("User-Agent", USER_AGENT)
        if self._token:
            request.add_header("Authorization", f"token {self._token}")
        return request

    def _post_issue(self, metadata: IssueMetadata, repository: str) -> str:
        request = self._build_request(metadata, repository)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                body = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"received {e.code} response from GitHub API: {body}") from e
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", e)
            raise RuntimeError(f"failed to make GitHub API request: {reason}") from e

        try:
            return json.loads(body)["html_url"]
        except (ValueError, KeyError, TypeError) as e:
            raise RuntimeError(f"failed to parse GitHub API response: {body}") from e

    async def file_new_issue(self, metadata: IssueMetadata, repository: str) -> str:
        """Create the issue and return its html_url.

        urllib blocks, so the request runs in a worker thread.
        """

        return await asyncio.to_thread(self._post_issue, metadata, repository)
