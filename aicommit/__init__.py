"""aicommit - AI-assisted Git commit messages and code reviews."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "load_config",
    # LLM
    "LLMClient",
    # Git
    "GitRepo",
    # Staging
    "DiffResolver", "StagingCoordinator",
    # Hooks
    "HookRunner",
    # Core workflow
    "AICommitWorkflow", "RunOutcome", "WorkflowResult",
    # Exceptions
    "AICommitError", "ConfigError", "GitError", "CommitFailure", "PushFailure",
    "StagingConflict", "HookFailure", "GenerationError", "ApiError",
    "MalformedResponse",
]


def __getattr__(name: str):
    """Lazy attribute loader so ``import aicommit`` stays cheap.

    httpx and the workflow modules are only imported once a name that
    needs them is accessed.
    """
    mapping = {
        # Config
        "Config": ("aicommit.config", "Config"),
        "load_config": ("aicommit.config", "load_config"),
        # LLM
        "LLMClient": ("aicommit.llm", "LLMClient"),
        # Git
        "GitRepo": ("aicommit.git", "GitRepo"),
        # Staging
        "DiffResolver": ("aicommit.staging", "DiffResolver"),
        "StagingCoordinator": ("aicommit.staging", "StagingCoordinator"),
        # Hooks
        "HookRunner": ("aicommit.hooks", "HookRunner"),
        # Core workflow
        "AICommitWorkflow": ("aicommit.core", "AICommitWorkflow"),
        "RunOutcome": ("aicommit.core", "RunOutcome"),
        "WorkflowResult": ("aicommit.core", "WorkflowResult"),
        # Exceptions
        "AICommitError": ("aicommit.exceptions", "AICommitError"),
        "ConfigError": ("aicommit.exceptions", "ConfigError"),
        "GitError": ("aicommit.exceptions", "GitError"),
        "CommitFailure": ("aicommit.exceptions", "CommitFailure"),
        "PushFailure": ("aicommit.exceptions", "PushFailure"),
        "StagingConflict": ("aicommit.exceptions", "StagingConflict"),
        "HookFailure": ("aicommit.exceptions", "HookFailure"),
        "GenerationError": ("aicommit.exceptions", "GenerationError"),
        "ApiError": ("aicommit.exceptions", "ApiError"),
        "MalformedResponse": ("aicommit.exceptions", "MalformedResponse"),
    }
    if name in mapping:
        mod_name, attr = mapping[name]
        mod = import_module(mod_name)
        value = getattr(mod, attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'aicommit' has no attribute {name!r}")


if TYPE_CHECKING:
    from .config import Config, load_config
    from .core import AICommitWorkflow, RunOutcome, WorkflowResult
    from .exceptions import (
        AICommitError,
        ApiError,
        CommitFailure,
        ConfigError,
        GenerationError,
        GitError,
        HookFailure,
        MalformedResponse,
        PushFailure,
        StagingConflict,
    )
    from .git import GitRepo
    from .hooks import HookRunner
    from .llm import LLMClient
    from .staging import DiffResolver, StagingCoordinator
