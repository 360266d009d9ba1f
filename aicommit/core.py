"""Core workflow logic for aicommit."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import Config
from .exceptions import (
    CommitFailure,
    GenerationError,
    GitError,
    HookFailure,
    PushFailure,
    StagingConflict,
)
from .git import GitRepo
from .hooks import HookRunner
from .llm import LLMClient
from .staging import DiffResolver, StagingCoordinator

logger = logging.getLogger(__name__)

RESET = "\033[0m"
BOLD = "\033[1m"
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RED = "\033[91m"


class RunOutcome(enum.Enum):
    NOOP = "no-op"
    PRINTED_REVIEW = "printed-review"
    COMMITTED = "committed"
    ROLLED_BACK_FAILURE = "rolled-back-failure"
    REJECTED = "rejected-before-mutation"
    # Commit refused by git; staged content is left for the user to retry.
    FAILED = "failed"


SUCCESS_OUTCOMES = {RunOutcome.NOOP, RunOutcome.PRINTED_REVIEW, RunOutcome.COMMITTED}


@dataclass
class WorkflowResult:
    """Terminal state of a run."""

    outcome: RunOutcome
    message: Optional[str] = None
    commit_hash: Optional[str] = None
    error: Optional[str] = None
    rolled_back: bool = False
    pushed: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


def prompt_for_push() -> bool:
    """Ask whether to push; only a single ``y`` (any case) means yes."""
    try:
        answer = input(f"{CYAN}Push to remote? [y/N] {RESET}")
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer.strip().lower() == "y"


class AICommitWorkflow:
    """Stage, check, generate, then commit or review, rolling back on failure."""

    def __init__(
        self,
        config: Config,
        git_repo: Optional[GitRepo] = None,
        llm_client: Optional[LLMClient] = None,
        hook_runner: Optional[HookRunner] = None,
        confirm_push: Callable[[], bool] = prompt_for_push,
        debug: bool = False,
    ) -> None:
        self._config = config
        self.git_repo = git_repo or GitRepo(config.git_repo_path)
        self._llm_client = llm_client
        self.hook_runner = hook_runner or HookRunner(self.git_repo.repo_path)
        self.confirm_push = confirm_push
        self.debug = debug

    @property
    def llm_client(self) -> LLMClient:
        # Built lazily so a no-op run never touches the provider.
        if self._llm_client is None:
            self._llm_client = LLMClient(self._config, debug=self.debug)
        return self._llm_client

    def execute_workflow(self) -> WorkflowResult:
        # Fails with ConfigError before anything is staged.
        self._config.require_api_key()

        resolver = DiffResolver(self.git_repo, self._config.context_lines)
        staging = StagingCoordinator(self.git_repo, resolver)

        try:
            staging.apply(self._config)
        except (StagingConflict, GitError) as e:
            if staging.mutated:
                return self._rollback(staging, f"Staging failed: {e}")
            return WorkflowResult(outcome=RunOutcome.REJECTED, error=str(e))

        diff = staging.snapshot
        if not diff.strip():
            logger.info("Nothing staged; nothing to do")
            return WorkflowResult(outcome=RunOutcome.NOOP)

        try:
            self._run_hooks()
            text = self._generate(diff)
        except (HookFailure, GenerationError, GitError) as e:
            return self._rollback(staging, str(e))

        if self._config.is_review:
            return WorkflowResult(outcome=RunOutcome.PRINTED_REVIEW, message=text)
        return self._commit(text)

    def _run_hooks(self) -> None:
        staged_files = self.git_repo.staged_files()
        if not self.hook_runner.run_hooks_if_configured(staged_files):
            raise HookFailure("Pre-commit hooks failed")

    def _generate(self, diff: str) -> str:
        if self._config.is_review:
            return self.llm_client.generate_review(diff, self._config.extra_prompt)
        return self.llm_client.generate_commit_message(diff)

    def _rollback(self, staging: StagingCoordinator, error: str) -> WorkflowResult:
        result = WorkflowResult(outcome=RunOutcome.ROLLED_BACK_FAILURE, error=error)
        try:
            result.rolled_back = staging.rollback()
        except GitError as e:
            logger.error("Rollback failed: %s", e)
            result.errors.append(f"Rollback failed: {e}")
        return result

    def _commit(self, message: str) -> WorkflowResult:
        try:
            self.git_repo.commit(message)
        except CommitFailure as e:
            return WorkflowResult(outcome=RunOutcome.FAILED, message=message, error=str(e))

        result = WorkflowResult(outcome=RunOutcome.COMMITTED, message=message)
        try:
            recent = self.git_repo.get_recent_commits(1)
            result.commit_hash = recent[0].split()[0] if recent else None
        except GitError as e:  # pragma: no cover - commit already succeeded
            logger.warning("Could not read new commit hash: %s", e)

        if self.confirm_push():
            try:
                self.git_repo.push()
                result.pushed = True
            except PushFailure as e:
                result.errors.append(f"Push failed: {e}")
        return result

