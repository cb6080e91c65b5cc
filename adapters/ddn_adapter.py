"""
DDN adapter - runs the Hasura DDN CLI subcommands used by the pipeline.
"""

import logging
import subprocess
from typing import Optional

import requests

from pipeline.models import CommandResult

from .base import CommandAdapter

logger = logging.getLogger(__name__)

INSTALL_TIMEOUT = 300


class DDNAdapter(CommandAdapter):
    """Wraps the `ddn` executable."""

    def __init__(self, executable: str = "ddn", pat: Optional[str] = None, **kwargs):
        super().__init__(executable, **kwargs)
        if pat:
            self.env["HASURA_DDN_PAT"] = pat

    def version(self) -> Optional[str]:
        result = self.run(["--version"])
        if not result.ok:
            return None
        output = (result.stdout or result.stderr).strip()
        return output or "unknown"

    def check_auth(self) -> CommandResult:
        """Verify the access token by asking the CLI to print it."""
        return self.run(["auth", "print-access-token"])

    def introspect(self, connector: str, connector_dir: str) -> CommandResult:
        return self.run(
            ["connector", "introspect", connector, "--connector-dir", connector_dir],
            capture_output=False,
        )

    def add_connector_resources(self, connector: str, subgraph: str) -> CommandResult:
        return self.run(
            ["connector-link", "update", connector, "--subgraph", subgraph, "--add-all-resources"],
            capture_output=False,
        )

    def create_build(self, supergraph_file: str, description: str) -> CommandResult:
        return self.run(
            ["supergraph", "build", "create", "--supergraph", supergraph_file, "--description", description],
            capture_output=False,
        )

    def list_builds(self, supergraph_file: str, limit: int = 5) -> CommandResult:
        return self.run(
            ["supergraph", "build", "list", "--supergraph", supergraph_file, "--limit", str(limit)],
            capture_output=False,
        )

    def install(self, installer_url: str) -> CommandResult:
        """
        Download the CLI installer script and run it with bash.

        Args:
            installer_url: URL of the installer shell script

        Returns:
            CommandResult of the bash invocation; download errors are
            reported as a failed result.
        """
        cmd = ["bash", "-s"]
        logger.info(f"Downloading DDN CLI installer from {installer_url}")
        try:
            response = requests.get(installer_url, timeout=60)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to download DDN CLI installer: {e}")
            return CommandResult(args=cmd, returncode=1, stderr=str(e))

        try:
            result = subprocess.run(
                cmd,
                input=response.text,
                cwd=str(self.cwd),
                env=self._child_env(),
                capture_output=True,
                text=True,
                timeout=INSTALL_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"DDN CLI installer timed out after {INSTALL_TIMEOUT}s")
            return CommandResult(args=cmd, returncode=124, timed_out=True)

        return CommandResult(
            args=cmd,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
