"""Command-line interface for aicommit."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

from .config import PROVIDERS, Config, load_config
from .core import (
    BOLD,
    DIM,
    GREEN,
    RED,
    RESET,
    YELLOW,
    AICommitWorkflow,
    RunOutcome,
    WorkflowResult,
)
from .exceptions import AICommitError, ConfigError, GitError
from .git import find_git_repo_root

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """Parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


class CLI:
    """Parses arguments, builds the run configuration and reports the outcome."""

    def __init__(self) -> None:
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = _ArgumentParser(
            prog="aic",
            description=(
                "Stage changes and commit them with an AI-generated message, "
                "or ask for an AI code review of the staged diff."
            ),
        )
        parser.add_argument(
            "-a",
            "--all",
            dest="auto_add",
            action="store_true",
            help="Stage all modified tracked files before diffing",
        )
        parser.add_argument(
            "-r",
            "--review",
            action="store_true",
            help="Print a code review of the staged diff instead of committing",
        )
        parser.add_argument(
            "-p",
            "--prompt",
            dest="extra_prompt",
            metavar="TEXT",
            help="Extra instructions for the reviewer (requires -r)",
        )
        parser.add_argument(
            "path",
            nargs="?",
            help="Stage exactly this path before diffing",
        )
        parser.add_argument(
            "--provider",
            choices=sorted(PROVIDERS),
            help="OpenAI-compatible provider (default: openai)",
        )
        parser.add_argument("--model", help="Model id to use for this run")
        parser.add_argument(
            "--repo-path",
            help="Repository to operate on (default: current directory)",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            help="HTTP request timeout in seconds (default: 30)",
        )
        parser.add_argument(
            "--debug", action="store_true", help="Enable debug logging"
        )
        return parser

    def run(self, args: Optional[list[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as e:
            return int(e.code or 0)

        logging.basicConfig(
            level=logging.DEBUG if parsed.debug else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        try:
            config = self._build_config(parsed)
            logger.debug("Run config: %s", config)
            workflow = AICommitWorkflow(config, debug=parsed.debug)
            result = workflow.execute_workflow()
        except AICommitError as e:
            self._print_error(str(e))
            return 1

        self._report(result)
        return result.exit_code

    def _build_config(self, parsed: argparse.Namespace) -> Config:
        # -p outside review mode is rejected before the repository is touched.
        if parsed.extra_prompt is not None and not parsed.review:
            raise ConfigError("-p can only be used together with -r (review mode)")

        start = Path(parsed.repo_path) if parsed.repo_path else None
        repo_root = find_git_repo_root(start)
        if repo_root is None:
            raise GitError(f"Not a Git repository: {start or Path.cwd()}")

        path = os.path.abspath(parsed.path) if parsed.path else None
        overrides = {
            "provider": parsed.provider,
            "model": parsed.model,
            "request_timeout": parsed.timeout,
        }
        return load_config(
            review=parsed.review,
            extra_prompt=parsed.extra_prompt,
            path=path,
            auto_add=parsed.auto_add,
            repo_root=repo_root,
            overrides=overrides,
        )

    def _report(self, result: WorkflowResult) -> None:
        outcome = result.outcome
        if outcome is RunOutcome.NOOP:
            print(f"{DIM}No staged changes; nothing to do.{RESET}")
        elif outcome is RunOutcome.PRINTED_REVIEW:
            print(result.message)
        elif outcome is RunOutcome.COMMITTED:
            subject = result.message.splitlines()[0] if result.message else ""
            short = f"{result.commit_hash} " if result.commit_hash else ""
            print(f"{GREEN}{BOLD}Committed{RESET} {short}{subject}")
            if result.pushed:
                print(f"{GREEN}Pushed to remote.{RESET}")
        else:
            self._print_error(result.error or outcome.value)
            if result.rolled_back:
                print(f"{YELLOW}Staged changes were rolled back.{RESET}", file=sys.stderr)
        for message in result.errors:
            print(f"{YELLOW}{message}{RESET}", file=sys.stderr)

    @staticmethod
    def _print_error(message: str) -> None:
        print(f"{RED}Error:{RESET} {message}", file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
