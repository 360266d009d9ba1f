"""Git operations for aicommit."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from .exceptions import CommitFailure, GitError, PushFailure

logger = logging.getLogger(__name__)


def find_git_repo_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Return the work-tree top level containing ``start_path``, or None."""
    path = Path(start_path or Path.cwd()).expanduser().resolve(strict=False)
    if path.is_file():
        path = path.parent
    try:
        top = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        ).stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return None
    return Path(top) if top else None


class GitRepo:
    """Handles Git repository operations."""

    def __init__(self, repo_path: Optional[str] = None) -> None:
        self.repo_path = Path(repo_path or ".")
        if not self._is_git_repo():
            raise GitError(f"Not a Git repository: {self.repo_path}")

    def _is_git_repo(self) -> bool:
        try:
            self._run_git_command(["rev-parse", "--git-dir"])
            return True
        except GitError:
            return False

    def _run_git_command(self, args: list[str]) -> str:
        """Run a Git command and return its output."""
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            cmd = " ".join(args)
            raise GitError(f"Git command failed: {cmd}\n{e.stderr}") from e
        except FileNotFoundError as exc:
            raise GitError("Git command not found. Please install Git.") from exc

    def get_staged_diff(self, context_lines: Optional[int] = None) -> str:
        """Get the diff of staged changes.

        Args:
            context_lines: Unchanged lines around each hunk; ``None`` keeps
                Git's default.
        """
        args = ["diff", "--cached"]
        if context_lines is not None:
            args.append(f"--unified={int(context_lines)}")
        return self._run_git_command(args)

    def staged_files(self) -> list[str]:
        """Return repo-relative paths of staged files that still exist."""
        output = self._run_git_command(
            ["diff", "--cached", "--name-only", "--diff-filter=d"]
        )
        return [line for line in output.split("\n") if line]

    def stage_path(self, file_path: str) -> None:
        """Stage exactly ``file_path``."""
        self._run_git_command(["add", "--", file_path])

    def stage_all_tracked(self) -> None:
        """Stage modifications and deletions of every tracked file."""
        self._run_git_command(["add", "--update", "--", ":/"])

    def has_head(self) -> bool:
        try:
            self._run_git_command(["rev-parse", "--verify", "--quiet", "HEAD"])
            return True
        except GitError:
            return False

    def reset_index(self) -> None:
        """Reset the index to HEAD, keeping working-tree files untouched.

        On an unborn branch there is no HEAD to reset to, so every entry is
        removed from the index instead.
        """
        if self.has_head():
            self._run_git_command(["reset", "--quiet", "HEAD", "--"])
        else:
            self._run_git_command(
                ["rm", "-r", "--cached", "--quiet", "--ignore-unmatch", "--", "."]
            )

    def commit(self, message: str) -> None:
        """Create a commit with the given message."""
        try:
            self._run_git_command(["commit", "-m", message])
        except GitError as e:
            raise CommitFailure(str(e)) from e

    def get_recent_commits(self, count: int = 5) -> list[str]:
        """Get recent commits as ``<short hash> <subject>`` lines."""
        output = self._run_git_command(["log", f"-{count}", "--pretty=%h %s"])
        return output.split("\n") if output else []

    def current_branch(self) -> str:
        return self._run_git_command(["rev-parse", "--abbrev-ref", "HEAD"])

    def push(self, remote: str = "origin", branch: Optional[str] = None) -> str:
        """Push current branch to remote.

        If branch is None, determine it via 'git rev-parse --abbrev-ref HEAD'.
        Returns the stdout from git push.
        """
        try:
            if branch is None:
                branch = self.current_branch()
            return self._run_git_command(["push", remote, branch])
        except GitError as e:
            raise PushFailure(str(e)) from e
