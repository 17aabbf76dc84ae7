"""Subprocess execution shared by the git and docker adapters."""

from __future__ import annotations

import asyncio
import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from kubeship.infra.k8s.controller import CommandResult

# Shell convention for "command not found"
EXIT_NOT_FOUND = 127


class CommandRunner:
    """Runs external programs rooted at the project directory.

    Failures are reported through :class:`CommandResult`, never raised;
    callers decide which exit codes are fatal.
    """

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        input_data: str | None = None,
    ) -> CommandResult:
        """Run ``cmd`` to completion, capturing text output.

        Args:
            cmd: Program followed by its arguments
            cwd: Working directory, the project root when omitted
            input_data: Text written to the program's stdin
        """
        argv = list(cmd)
        workdir = cwd or self.project_root
        logger.debug(f"$ {' '.join(argv)} (in {workdir})")
        try:
            completed = subprocess.run(
                argv, cwd=workdir, input=input_data, capture_output=True, text=True
            )
        except FileNotFoundError as e:
            logger.debug(f"{argv[0]} is not installed: {e}")
            return CommandResult(success=False, stderr=str(e), returncode=EXIT_NOT_FOUND)

        return CommandResult(
            success=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )

    async def run_async(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        input_data: str | None = None,
    ) -> CommandResult:
        return await asyncio.to_thread(self.run, cmd, cwd=cwd, input_data=input_data)
