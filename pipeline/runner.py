"""
Local pipeline runner - replays the hosted pipeline's command sequence.

Stages run strictly in order and stop at the first hard failure. Files
produced by earlier steps are left in place.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from adapters import DDNAdapter

from .models import CommandResult, PipelineSettings, StepResult, StepStatus
from .settings import load_connector_configuration, load_env_file

logger = logging.getLogger(__name__)


class PipelineRunner:
    """Runs the introspect → update metadata → build → package sequence."""

    def __init__(
        self,
        project_root: str = ".",
        settings: Optional[PipelineSettings] = None,
        ddn: Optional[DDNAdapter] = None,
        install_cli: bool = True,
        dry_run: bool = False,
    ):
        self.project_root = Path(project_root)
        self.settings = settings or PipelineSettings()
        self.ddn = ddn or DDNAdapter(
            self.settings.ddn_executable,
            cwd=str(self.project_root),
            timeout=self.settings.command_timeout,
        )
        self.install_cli = install_cli
        self.dry_run = dry_run
        self.env: Dict[str, str] = {}
        self.steps: List[StepResult] = []

    def _record(self, name: str, status: StepStatus, message: Optional[str] = None) -> StepResult:
        step = StepResult(name=name, status=status, message=message)
        self.steps.append(step)
        if status == StepStatus.FAILED:
            logger.error(f"❌ {name}: {message}")
        elif status == StepStatus.WARNING:
            logger.warning(f"⚠️  {name}: {message}")
        else:
            logger.info(f"✅ {name}" + (f": {message}" if message else ""))
        return step

    def _call(self, description: str, result_fn, *args) -> CommandResult:
        if self.dry_run:
            logger.info(f"[dry-run] {description}")
            return CommandResult(args=[self.ddn.executable], returncode=0)
        return result_fn(*args)

    def run(self) -> int:
        """
        Execute every step.

        Returns:
            0 when all hard steps succeed (warnings allowed), 1 otherwise
        """
        for step in (
            self.load_environment,
            self.ensure_cli,
            self.verify_auth,
            self.introspect,
            self.update_metadata,
            self.build_supergraph,
            self.package_artifacts,
            self.list_builds,
        ):
            result = step()
            if result.status == StepStatus.FAILED:
                return 1
        return 0

    def load_environment(self) -> StepResult:
        name = "Load environment"
        env_file = self.settings.env_file
        try:
            file_env = load_env_file(self.project_root / env_file)
        except FileNotFoundError:
            return self._record(
                name,
                StepStatus.FAILED,
                f"{env_file} file not found. Please create a {env_file} file with required environment variables.",
            )
        self.ddn.env.update(file_env)
        # Exported variables count too; env file entries take precedence
        self.env = {**os.environ, **file_env}
        return self._record(name, StepStatus.SUCCESS, f"Environment variables loaded from {env_file}")

    def ensure_cli(self) -> StepResult:
        name = "Check DDN CLI installation"
        if self.ddn.is_installed():
            if self.dry_run:
                return self._record(name, StepStatus.SUCCESS, f"DDN CLI found: {self.ddn.executable}")
            return self._record(name, StepStatus.SUCCESS, f"DDN CLI found: {self.ddn.version() or 'unknown'}")

        if not self.install_cli:
            return self._record(name, StepStatus.FAILED, "DDN CLI not found and installation is disabled")

        logger.warning("⚠️  DDN CLI not found. Installing...")
        result = self._call(
            f"install DDN CLI from {self.settings.ddn_install_url}",
            self.ddn.install,
            self.settings.ddn_install_url,
        )
        if not result.ok:
            return self._record(name, StepStatus.FAILED, f"DDN CLI installation failed: {result.stderr.strip()}")
        return self._record(name, StepStatus.SUCCESS, "DDN CLI installed")

    def verify_auth(self) -> StepResult:
        name = "Verify DDN authentication"
        pat_var = self.settings.pat_env_var
        if not self.env.get(pat_var):
            return self._record(
                name,
                StepStatus.FAILED,
                f"{pat_var} not set in {self.settings.env_file} or the environment. "
                "Run: ddn auth login, then: ddn auth print-access-token",
            )

        result = self._call("ddn auth print-access-token", self.ddn.check_auth)
        if not result.ok:
            return self._record(name, StepStatus.FAILED, f"Authentication failed. Please check your {pat_var}")
        return self._record(name, StepStatus.SUCCESS, "Authentication verified")

    def introspect(self) -> StepResult:
        name = "Introspect connector"
        logger.info("STAGE 1: INTROSPECTION")
        jdbc_var = self.settings.jdbc_url_env_var
        if not self.env.get(jdbc_var):
            return self._record(
                name, StepStatus.FAILED, f"{jdbc_var} not set in {self.settings.env_file} or the environment"
            )

        connector = self.settings.connector_name
        result = self._call(
            f"ddn connector introspect {connector}",
            self.ddn.introspect,
            connector,
            self.settings.connector_dir,
        )
        if not result.ok:
            return self._record(
                name,
                StepStatus.FAILED,
                f"Connector introspection failed (exit {result.returncode}). "
                f"Tip: Check your Snowflake credentials in {self.settings.env_file}",
            )

        message = "Connector introspection completed"
        config_path = self.project_root / self.settings.connector_configuration
        if config_path.is_file():
            try:
                configuration = load_connector_configuration(config_path)
                message += f"; found {configuration.table_count} tables"
            except ValueError as e:
                logger.warning(f"⚠️  Could not read {config_path}: {e}")
        return self._record(name, StepStatus.SUCCESS, message)

    def update_metadata(self) -> StepResult:
        name = "Add connector resources to metadata"
        connector = self.settings.connector_name
        result = self._call(
            f"ddn connector-link update {connector} --add-all-resources",
            self.ddn.add_connector_resources,
            connector,
            self.settings.subgraph,
        )
        if not result.ok:
            return self._record(name, StepStatus.WARNING, "Failed to add connector resources (may already exist)")
        return self._record(name, StepStatus.SUCCESS, "Connector resources added to metadata")

    def build_supergraph(self) -> StepResult:
        name = "Build supergraph"
        logger.info("STAGE 2: SUPERGRAPH BUILD")
        result = self._call(
            "ddn supergraph build create",
            self.ddn.create_build,
            self.settings.supergraph_file,
            self.settings.build_description,
        )
        if not result.ok:
            return self._record(name, StepStatus.FAILED, f"Supergraph build failed (exit {result.returncode})")
        return self._record(name, StepStatus.SUCCESS, "Supergraph build completed")

    def package_artifacts(self) -> StepResult:
        name = "Generate build artifacts"
        build_dir = self.project_root / self.settings.build_dir
        if self.dry_run:
            logger.info(f"[dry-run] copy metadata into {self.settings.build_dir}")
            return self._record(name, StepStatus.SKIPPED, "dry run")

        build_dir.mkdir(parents=True, exist_ok=True)
        copied = 0
        for relative in self.settings.metadata_dirs:
            source = self.project_root / relative
            if not source.is_dir():
                logger.debug(f"Skipping missing metadata directory: {relative}")
                continue
            for entry in source.iterdir():
                target = build_dir / entry.name
                try:
                    if entry.is_dir():
                        shutil.copytree(entry, target, dirs_exist_ok=True)
                    else:
                        shutil.copy2(entry, target)
                    copied += 1
                except OSError as e:
                    logger.warning(f"⚠️  Could not copy {entry}: {e}")

        return self._record(
            name, StepStatus.SUCCESS, f"Build artifacts generated in {self.settings.build_dir}/ ({copied} entries)"
        )

    def list_builds(self) -> StepResult:
        name = "Validate supergraph build"
        result = self._call(
            "ddn supergraph build list",
            self.ddn.list_builds,
            self.settings.supergraph_file,
            self.settings.build_list_limit,
        )
        if not result.ok:
            return self._record(name, StepStatus.WARNING, "Could not list builds")
        return self._record(name, StepStatus.SUCCESS, "Build validation completed")
