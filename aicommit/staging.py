"""Staged-diff tracking and the single staging action a run may take."""

from __future__ import annotations

import logging
from typing import Optional

from .config import Config
from .exceptions import GitError, StagingConflict
from .git import GitRepo

logger = logging.getLogger(__name__)


class DiffResolver:
    """Computes the staged diff with a fixed amount of context."""

    def __init__(self, git_repo: GitRepo, context_lines: Optional[int] = None) -> None:
        self.git_repo = git_repo
        self.context_lines = context_lines

    def current_diff(self) -> str:
        # A failing backend is indistinguishable from "nothing staged".
        try:
            return self.git_repo.get_staged_diff(self.context_lines)
        except GitError as e:
            logger.warning("Could not read staged diff, assuming none: %s", e)
            return ""


class StagingCoordinator:
    """Applies at most one staging action on top of a clean index.

    ``snapshot`` always reflects the staged diff after the last completed
    staging action. Both actions refuse to run when something is already
    staged, so a rollback can never discard changes the user staged
    before the run.
    """

    def __init__(self, git_repo: GitRepo, resolver: DiffResolver) -> None:
        self.git_repo = git_repo
        self.resolver = resolver
        self.snapshot = resolver.current_diff()
        self.mutated = False

    @property
    def has_staged_changes(self) -> bool:
        return bool(self.snapshot.strip())

    def _require_clean_index(self, action: str) -> None:
        if self.has_staged_changes:
            raise StagingConflict(
                f"Cannot {action}: changes are already staged. "
                "Commit or unstage them first."
            )

    def _refresh(self) -> None:
        self.snapshot = self.resolver.current_diff()

    def stage_path(self, path: str) -> None:
        self._require_clean_index(f"stage '{path}'")
        self.git_repo.stage_path(path)
        self.mutated = True
        self._refresh()

    def stage_all_tracked(self) -> None:
        self._require_clean_index("stage all tracked changes")
        self.git_repo.stage_all_tracked()
        self.mutated = True
        self._refresh()

    def apply(self, config: Config) -> None:
        """Run the staging action requested by ``config``.

        A path and ``auto_add`` are never combined: the path is staged
        first and the request then fails with StagingConflict, whether or
        not the path had any changes.
        """
        if config.path and config.auto_add:
            self.stage_path(config.path)
            raise StagingConflict(
                "Cannot stage all tracked changes together with a path; "
                "use either -a or a path."
            )
        if config.path:
            self.stage_path(config.path)
        elif config.auto_add:
            self.stage_all_tracked()

    def rollback(self) -> bool:
        """Unstage whatever this run staged. Returns True if a reset ran."""
        if not self.mutated:
            return False
        logger.info("Rolling back staged changes")
        self.git_repo.reset_index()
        self.mutated = False
        self._refresh()
        return True
