"""Pre-commit hook gate."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

HOOK_CONFIG_FILE = ".pre-commit-config.yaml"


class HookRunner:
    """Runs the repository's pre-commit hooks over staged files."""

    def __init__(self, repo_path: str | Path) -> None:
        self.repo_path = Path(repo_path)

    @property
    def config_path(self) -> Path:
        return self.repo_path / HOOK_CONFIG_FILE

    def is_configured(self) -> bool:
        return self.config_path.is_file()

    def run_hooks_if_configured(self, staged_files: Sequence[str]) -> bool:
        """Return True when hooks pass or there is nothing to run.

        Hook output goes straight to the terminal so the user can see what
        failed.
        """
        if not self.is_configured():
            logger.debug("No %s found, skipping hooks", HOOK_CONFIG_FILE)
            return True
        if not staged_files:
            return True

        command = ["pre-commit", "run", "--files", *staged_files]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(command, cwd=self.repo_path, check=False)
        except FileNotFoundError:
            logger.error(
                "%s is present but the pre-commit executable was not found",
                HOOK_CONFIG_FILE,
            )
            return False
        if result.returncode != 0:
            logger.info("pre-commit exited with status %s", result.returncode)
            return False
        return True
