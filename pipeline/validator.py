"""
Pipeline configuration validator.

Runs independent checks over a DDN project before it is pushed to the
hosted pipeline:

- required files
- environment variables in the env file (set and well-formed)
- DDN CLI installation and authentication
- connector configuration.json
- metadata directories
- hosted pipeline definition
- git working tree

Each check records pass/warn/fail on a ValidationReport. Only failures
make the run exit non-zero.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from adapters import DDNAdapter, GitAdapter

from .models import CheckResult, CheckStatus, PipelineSettings, ValidationReport
from .settings import load_connector_configuration, load_env_file

logger = logging.getLogger(__name__)


class ConfigValidator:
    """Collects check results for one project directory."""

    def __init__(
        self,
        project_root: str = ".",
        settings: Optional[PipelineSettings] = None,
        ddn: Optional[DDNAdapter] = None,
        git: Optional[GitAdapter] = None,
        check_cli: bool = True,
        check_git: bool = True,
    ):
        self.project_root = Path(project_root)
        self.settings = settings or PipelineSettings()
        self.ddn = ddn or DDNAdapter(
            self.settings.ddn_executable,
            cwd=str(self.project_root),
            timeout=self.settings.command_timeout,
        )
        self.git = git or GitAdapter(cwd=str(self.project_root))
        self.check_cli = check_cli
        self.check_git = check_git
        self.env: Dict[str, str] = {}
        self.report = ValidationReport()
        self._section = ""

    def _record(self, status: CheckStatus, message: str, details: Optional[List[str]] = None) -> None:
        self.report.results.append(
            CheckResult(section=self._section, status=status, message=message, details=details or [])
        )
        logger.debug(f"[{self._section}] {status.value}: {message}")

    def _pass(self, message: str, details: Optional[List[str]] = None) -> None:
        self._record(CheckStatus.PASS, message, details)

    def _warn(self, message: str) -> None:
        self._record(CheckStatus.WARN, message)

    def _fail(self, message: str) -> None:
        self._record(CheckStatus.FAIL, message)

    def validate(self) -> ValidationReport:
        """Run every check and return the report."""
        self.check_required_files()
        self.check_environment()
        if self.check_cli:
            self.check_ddn_cli()
        self.check_connector_configuration()
        self.check_metadata()
        self.check_pipeline_definition()
        if self.check_git:
            self.check_git_repository()
        return self.report

    def check_required_files(self) -> None:
        self._section = "Required Files"
        for relative in self.settings.required_files:
            if (self.project_root / relative).is_file():
                self._pass(f"{relative} exists")
            else:
                self._fail(f"{relative} not found")

    def check_environment(self) -> None:
        self._section = "Environment Variables"
        env_file = self.settings.env_file
        # Exported variables count too; env file entries take precedence
        self.env = dict(os.environ)
        try:
            self.env.update(load_env_file(self.project_root / env_file))
        except FileNotFoundError:
            self._fail(f"{env_file} file not found")
            return
        self._pass(f"{env_file} file exists")

        for var in self.settings.required_env_vars:
            value = self.env.get(var, "")
            if not value:
                self._fail(f"{var} is not set in {env_file} or the environment")
            elif not self._well_formed(var, value):
                self._fail(f"{var} is malformed (expected pattern {self.settings.env_var_patterns[var]})")
            else:
                self._pass(f"{var} is set")

        for var in self.settings.recommended_env_vars:
            value = self.env.get(var, "")
            if not value:
                if var == self.settings.pat_env_var:
                    self._warn(f"{var} not set (required for pipeline)")
                else:
                    self._warn(f"{var} not set (will use default)")
            elif not self._well_formed(var, value):
                self._warn(f"{var} is malformed (expected pattern {self.settings.env_var_patterns[var]})")
            elif var in self.settings.echoed_env_vars:
                self._pass(f"{var} is set: {value}")
            else:
                self._pass(f"{var} is set")

    def _well_formed(self, var: str, value: str) -> bool:
        pattern = self.settings.env_var_patterns.get(var)
        if pattern is None:
            return True
        return re.match(pattern, value) is not None

    def check_ddn_cli(self) -> None:
        self._section = "DDN CLI"
        if not self.ddn.is_installed():
            self._warn("DDN CLI not installed (will be installed in pipeline)")
            return

        self._pass(f"DDN CLI installed: {self.ddn.version() or 'unknown'}")

        pat = self.env.get(self.settings.pat_env_var)
        if pat:
            self.ddn.env[self.settings.pat_env_var] = pat
            if self.ddn.check_auth().ok:
                self._pass("DDN authentication successful")
            else:
                self._fail("DDN authentication failed")

    def check_connector_configuration(self) -> None:
        self._section = "Connector Configuration"
        config_path = self.project_root / self.settings.connector_configuration
        if not config_path.is_file():
            self._warn("configuration.json not found (will be created during introspection)")
            return
        self._pass("Connector configuration.json exists")

        try:
            configuration = load_connector_configuration(config_path)
        except json.JSONDecodeError as e:
            self._fail(f"configuration.json is invalid JSON: {e}")
            return
        except ValueError as e:
            self._fail(f"configuration.json has unexpected structure: {e}")
            return
        self._pass("configuration.json is valid JSON")

        if configuration.table_count > 0:
            self._pass(f"Found {configuration.table_count} tables in configuration")
        else:
            self._warn("No tables found in configuration (run introspection)")

    def check_metadata(self) -> None:
        self._section = "Metadata"
        for relative in self.settings.metadata_dirs:
            metadata_dir = self.project_root / relative
            required = relative in self.settings.required_metadata_dirs

            if not metadata_dir.is_dir():
                if required:
                    self._fail(f"{relative} directory not found")
                else:
                    self._warn(f"{relative} directory not found")
                continue

            if required:
                self._pass(f"{relative} directory exists")
                continue

            hml_count = sum(1 for _ in metadata_dir.rglob("*.hml"))
            if hml_count > 0:
                self._pass(f"Found {hml_count} metadata files in {relative}")
            else:
                self._warn(f"No .hml files found in {relative}")

    def check_pipeline_definition(self) -> None:
        self._section = "Pipeline Definition"
        pipeline_path = self.project_root / self.settings.pipeline_file
        if not pipeline_path.is_file():
            # Absence is already reported by the required files check
            return

        try:
            with open(pipeline_path, 'r') as f:
                definition = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self._fail(f"{self.settings.pipeline_file} is invalid YAML: {e}")
            return

        if not isinstance(definition, dict):
            self._fail(f"{self.settings.pipeline_file} must contain a YAML mapping")
            return

        for key in ("stages", "jobs", "steps"):
            if definition.get(key):
                self._pass(f"{self.settings.pipeline_file} declares {len(definition[key])} {key}")
                return
        self._warn(f"{self.settings.pipeline_file} declares no stages, jobs or steps")

    def check_git_repository(self) -> None:
        self._section = "Git Configuration"
        if not self.git.is_repository():
            self._fail("Not a git repository")
            return
        self._pass("Git repository initialized")

        if set(self.git.remote_names()) & set(self.settings.git_remotes):
            self._pass("Git remote configured", details=self.git.remotes())
        else:
            self._warn("No git remote configured")

        self._pass(f"Current branch: {self.git.current_branch() or '(detached HEAD)'}")

        if self.git.has_uncommitted_changes():
            self._warn("You have uncommitted changes")
        else:
            self._pass("No uncommitted changes")
