"""GitHub REST implementation of the issue client.

Single POST per issue, no retries. Any failure surfaces as GitHubAPIError.
"""

import logging
from typing import Any

import httpx

from src.core.config import GitHubConfig
from src.core.schemas import CreateIssueParams, IssueResult
from src.issues.base import IssueClient

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "job-digest-issues/0.1.0"


class GitHubAPIError(RuntimeError):
    """Issue creation failed. status_code is None for transport errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubIssueClient(IssueClient):
    """Creates issues in one repository through the GitHub REST API.

    Usage::

        client = GitHubIssueClient(token, "octocat", "jobs")
        result = await client.create_issue(params)

    An ``httpx.AsyncClient`` may be injected (e.g. with a mock transport);
    otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        api_url: str = GITHUB_API_URL,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        for name, value in (("token", token), ("owner", owner), ("repo", repo)):
            if not value:
                msg = f"GitHub {name} must not be empty"
                raise ValueError(msg)
        self._token = token
        self._issues_url = f"{api_url.rstrip('/')}/repos/{owner}/{repo}/issues"
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_config(cls, config: GitHubConfig) -> "GitHubIssueClient":
        return cls(
            config.token,
            config.owner,
            config.repo,
            api_url=config.api_url,
            timeout=config.timeout_seconds,
        )

    @property
    def issues_url(self) -> str:
        return self._issues_url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }

    async def create_issue(self, params: CreateIssueParams) -> IssueResult:
        payload = {"title": params.title, "body": params.body, "labels": list(params.labels)}
        logger.debug("POST %s (%d labels)", self._issues_url, len(params.labels))

        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            msg = f"Failed to create GitHub issue: {e}"
            raise GitHubAPIError(msg) from e

        if response.is_error:
            msg = (
                "Failed to create GitHub issue: "
                f"GitHub API error ({response.status_code}): {_error_message(response)}"
            )
            raise GitHubAPIError(msg, status_code=response.status_code)

        try:
            data = response.json()
            return IssueResult(number=data["number"], url=data["html_url"])
        except (ValueError, KeyError, TypeError) as e:
            msg = f"Failed to create GitHub issue: unexpected response body ({e})"
            raise GitHubAPIError(msg, status_code=response.status_code) from e

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self._issues_url, json=payload, headers=self._headers(), timeout=self._timeout,
            )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._issues_url, json=payload, headers=self._headers())


def _error_message(response: httpx.Response) -> str:
    """Prefer GitHub's JSON 'message', fall back to the reason phrase."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase
