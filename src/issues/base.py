"""Collaborator contracts consumed by the digest service."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from src.core.schemas import CreateIssueParams, IssueResult


class IssueClient(ABC):
    """Base class that every issue tracker client must implement."""

    @abstractmethod
    async def create_issue(self, params: CreateIssueParams) -> IssueResult:
        """Create an issue and return its number and URL.

        Errors are raised as-is; the digest service logs and re-raises them.
        """


@runtime_checkable
class DigestLogger(Protocol):
    """Minimal logger interface. A ``logging.Logger`` satisfies it."""

    def info(self, msg: str) -> None: ...
    def debug(self, msg: str) -> None: ...
    def error(self, msg: str) -> None: ...
