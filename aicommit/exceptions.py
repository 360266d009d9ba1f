"""Exception hierarchy for aicommit."""

from __future__ import annotations

from typing import Optional


class AICommitError(Exception):
    """Base class for all aicommit errors."""


class ConfigError(AICommitError):
    """Invalid flag combination or missing credentials."""


class GitError(AICommitError):
    """A Git command failed."""


class CommitFailure(GitError):
    """Git refused to create the commit."""


class PushFailure(GitError):
    """Pushing the freshly created commit failed."""


class StagingConflict(AICommitError):
    """Staging was requested while other changes were already staged."""


class HookFailure(AICommitError):
    """Pre-commit hooks rejected the staged files."""


class GenerationError(AICommitError):
    """The text-generation service could not produce usable output."""


class ApiError(GenerationError):
    """The service answered with its own error message."""

    def __init__(self, error_text: str, status_code: Optional[int] = None) -> None:
        super().__init__(error_text)
        self.error_text = error_text
        self.status_code = status_code


class MalformedResponse(GenerationError):
    """Neither completion text nor an error message could be extracted."""
