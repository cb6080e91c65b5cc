"""
Base adapter class for driving external command-line tools.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from pipeline.models import CommandResult

logger = logging.getLogger(__name__)


class CommandAdapter:
    """Base class for wrappers around an external CLI."""

    def __init__(
        self,
        executable: str,
        cwd: str = ".",
        env: Optional[Dict[str, str]] = None,
        timeout: int = 3600,
    ):
        """
        Initialize adapter.

        Args:
            executable: Name or path of the executable
            cwd: Working directory for every invocation
            env: Extra environment variables layered over os.environ
            timeout: Per-command timeout in seconds
        """
        self.executable = executable
        self.cwd = Path(cwd)
        self.env = dict(env or {})
        self.timeout = timeout

    def resolve_executable(self) -> Optional[str]:
        """Return the full path of the executable, or None if it is not on PATH."""
        return shutil.which(self.executable, path=self._child_env().get("PATH"))

    def is_installed(self) -> bool:
        return self.resolve_executable() is not None

    def _child_env(self) -> Dict[str, str]:
        child_env = os.environ.copy()
        child_env.update(self.env)
        return child_env

    def run(self, args: List[str], capture_output: bool = True) -> CommandResult:
        """
        Run the executable with the given arguments.

        Args:
            args: Arguments after the executable name
            capture_output: Capture stdout/stderr instead of streaming to the terminal

        Returns:
            CommandResult; a missing executable or a timeout is reported
            as a non-zero return code rather than raised.
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running: {' '.join(cmd)} (cwd={self.cwd})")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.cwd),
                env=self._child_env(),
                capture_output=capture_output,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            logger.error(f"Executable not found: {self.executable}")
            return CommandResult(args=cmd, returncode=127, stderr=f"{self.executable}: command not found")
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {self.timeout}s: {' '.join(cmd)}")
            return CommandResult(args=cmd, returncode=124, timed_out=True)

        return CommandResult(
            args=cmd,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def version(self) -> Optional[str]:
        """
        Report the tool version.

        Returns:
            Version string, or None if the tool cannot report one
        """
        result = self.run(["--version"])
        return result.stdout.strip() if result.ok else None
