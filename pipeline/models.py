"""
Pydantic models for pipeline settings, check results and command results.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class StepStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineSettings(BaseModel):
    """Project layout and names used by the validator, runner and pipeline definition."""

    env_file: str = Field(".env", description="Environment file, relative to the project root")
    connector_name: str = Field("my_snowflake", description="Connector to introspect")
    subgraph: str = Field("app", description="Subgraph owning the connector")
    supergraph_file: str = Field("supergraph.yaml", description="Supergraph config file")
    pipeline_file: str = Field("azure-pipelines.yml", description="Hosted pipeline definition file")
    required_files: List[str] = Field(
        default_factory=lambda: [
            "azure-pipelines.yml",
            "supergraph.yaml",
            "app/subgraph.yaml",
            "app/connector/my_snowflake/connector.yaml",
        ],
        description="Files that must exist",
    )
    required_env_vars: List[str] = Field(
        default_factory=lambda: [
            "APP_MY_SNOWFLAKE_JDBC_URL",
            "APP_MY_SNOWFLAKE_AUTHORIZATION_HEADER",
            "APP_MY_SNOWFLAKE_HASURA_SERVICE_TOKEN_SECRET",
        ],
        description="Variables that must be set in the env file",
    )
    recommended_env_vars: List[str] = Field(
        default_factory=lambda: ["HASURA_DDN_PAT", "JDBC_SCHEMAS"],
        description="Variables that only warn when missing",
    )
    env_var_patterns: Dict[str, str] = Field(
        default_factory=lambda: {
            "APP_MY_SNOWFLAKE_JDBC_URL": r"^jdbc:snowflake://\S+$",
            "JDBC_SCHEMAS": r"^\s*[A-Za-z_][\w$]*(\s*,\s*[A-Za-z_][\w$]*)*\s*$",
        },
        description="Regex each set variable must match",
    )
    echoed_env_vars: List[str] = Field(
        default_factory=lambda: ["JDBC_SCHEMAS"],
        description="Variables whose value may be printed",
    )
    pat_env_var: str = Field("HASURA_DDN_PAT", description="Variable holding the DDN access token")
    jdbc_url_env_var: str = Field("APP_MY_SNOWFLAKE_JDBC_URL", description="Variable holding the JDBC URL")
    metadata_dirs: List[str] = Field(
        default_factory=lambda: ["app/metadata", "globals/metadata"],
        description="Metadata directories copied into the build directory",
    )
    required_metadata_dirs: List[str] = Field(
        default_factory=lambda: ["globals/metadata"],
        description="Metadata directories whose absence is an error",
    )
    build_dir: str = Field("engine/build", description="Build artifact directory")
    build_description: str = Field("Local test build", description="Description for local builds")
    build_list_limit: int = Field(5, description="Number of builds to list after building")
    ddn_executable: str = Field("ddn", description="DDN CLI executable")
    ddn_install_url: str = Field(
        "https://graphql-engine-cdn.hasura.io/ddn/cli/v4/get.sh",
        description="DDN CLI installer script",
    )
    git_remotes: List[str] = Field(
        default_factory=lambda: ["origin", "azure"],
        description="Remote names that count as configured",
    )
    trigger_branches: List[str] = Field(
        default_factory=lambda: ["main"],
        description="Branches that trigger the hosted pipeline",
    )
    variable_group: str = Field("ddn-snowflake-secrets", description="Azure DevOps variable group")
    vm_image: str = Field("ubuntu-latest", description="Hosted agent image")
    command_timeout: int = Field(3600, description="Timeout per external command in seconds")

    @property
    def connector_dir(self) -> str:
        return f"{self.subgraph}/connector/{self.connector_name}"

    @property
    def connector_configuration(self) -> str:
        return f"{self.connector_dir}/configuration.json"


class ConnectorConfiguration(BaseModel):
    """Connector configuration document written by introspection."""

    model_config = ConfigDict(extra="allow")

    version: Optional[Any] = Field(None, description="Configuration format version")
    tables: Optional[List[Any]] = Field(None, description="Introspected tables")

    @property
    def table_count(self) -> int:
        return len(self.tables or [])


class CheckResult(BaseModel):
    """Outcome of a single validator check."""

    section: str
    status: CheckStatus
    message: str
    details: List[str] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """All check results of one validator run."""

    results: List[CheckResult] = Field(default_factory=list)

    @property
    def errors(self) -> List[CheckResult]:
        return [r for r in self.results if r.status == CheckStatus.FAIL]

    @property
    def warnings(self) -> List[CheckResult]:
        return [r for r in self.results if r.status == CheckStatus.WARN]

    @property
    def exit_code(self) -> int:
        return 1 if self.errors else 0


class CommandResult(BaseModel):
    """Result of one external command invocation."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class StepResult(BaseModel):
    """Outcome of one runner step."""

    name: str
    status: StepStatus
    message: Optional[str] = None
