"""Shared fixtures: a throwaway DDN project and stand-ins for the ddn/git CLIs."""

import json

import pytest
import yaml

from adapters.ddn_adapter import DDNAdapter
from adapters.git_adapter import GitAdapter
from pipeline.models import CommandResult


VALID_ENV = """\
APP_MY_SNOWFLAKE_JDBC_URL=jdbc:snowflake://acme.snowflakecomputing.com/?user=svc&warehouse=WH
APP_MY_SNOWFLAKE_AUTHORIZATION_HEADER=Bearer abc123
APP_MY_SNOWFLAKE_HASURA_SERVICE_TOKEN_SECRET=s3cret
HASURA_DDN_PAT=pat-token
JDBC_SCHEMAS=PUBLIC,SALES
"""


class FakeDDNAdapter(DDNAdapter):
    """Records every invocation instead of running ddn."""

    def __init__(self, failing=(), installed=True):
        super().__init__("ddn")
        self.failing = list(failing)
        self.installed = installed
        self.calls = []

    def is_installed(self):
        return self.installed

    def run(self, args, capture_output=True):
        self.calls.append(list(args))
        command = " ".join(args)
        returncode = 1 if any(command.startswith(prefix) for prefix in self.failing) else 0
        return CommandResult(args=["ddn", *args], returncode=returncode, stdout="v2.9.0\n")

    def install(self, installer_url):
        self.calls.append(["install", installer_url])
        self.installed = True
        return CommandResult(args=["bash", "-s"], returncode=0)

    def commands(self):
        return [" ".join(call) for call in self.calls]


class FakeGitAdapter(GitAdapter):
    """Answers git queries from canned state."""

    def __init__(self, repository=True, remotes=None, branch="main", dirty=False):
        super().__init__()
        self.repository = repository
        self.remote_lines = ["origin\thttps://dev.azure.com/acme/ddn/_git/ddn (fetch)"] if remotes is None else remotes
        self.branch = branch
        self.dirty = dirty

    def run(self, args, capture_output=True):
        if not self.repository:
            return CommandResult(args=["git", *args], returncode=128, stderr="fatal: not a git repository")
        if args[:1] == ["rev-parse"]:
            return CommandResult(args=["git", *args], returncode=0, stdout=".git\n")
        if args[:1] == ["remote"]:
            return CommandResult(args=["git", *args], returncode=0, stdout="\n".join(self.remote_lines))
        if args[:1] == ["branch"]:
            return CommandResult(args=["git", *args], returncode=0, stdout=f"{self.branch}\n")
        if args[:1] == ["diff-index"]:
            return CommandResult(args=["git", *args], returncode=1 if self.dirty else 0)
        return CommandResult(args=["git", *args], returncode=0)


@pytest.fixture
def project(tmp_path):
    """Create a complete, valid DDN project tree."""
    root = tmp_path / "project"
    connector_dir = root / "app" / "connector" / "my_snowflake"
    connector_dir.mkdir(parents=True)
    (root / "app" / "metadata").mkdir(parents=True)
    (root / "globals" / "metadata").mkdir(parents=True)

    pipeline = {
        "trigger": {"branches": {"include": ["main"]}},
        "stages": [{"stage": "Introspect"}, {"stage": "Build"}],
    }
    with open(root / "azure-pipelines.yml", 'w') as f:
        yaml.dump(pipeline, f)

    (root / "supergraph.yaml").write_text("kind: Supergraph\nversion: v2\n")
    (root / "app" / "subgraph.yaml").write_text("kind: Subgraph\nversion: v2\n")
    (connector_dir / "connector.yaml").write_text("kind: Connector\nversion: v2\n")
    (connector_dir / "configuration.json").write_text(
        json.dumps({"version": "v1", "tables": [{"name": "CUSTOMERS"}, {"name": "ORDERS"}]})
    )
    (root / "app" / "metadata" / "Customers.hml").write_text("kind: ObjectType\n")
    (root / "app" / "metadata" / "Orders.hml").write_text("kind: ObjectType\n")
    (root / "globals" / "metadata" / "auth-config.hml").write_text("kind: AuthConfig\n")
    (root / ".env").write_text(VALID_ENV)

    return root


@pytest.fixture
def fake_ddn():
    return FakeDDNAdapter()


@pytest.fixture
def fake_git():
    return FakeGitAdapter()


@pytest.fixture
def make_ddn():
    return FakeDDNAdapter


@pytest.fixture
def make_git():
    return FakeGitAdapter


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep variables exported by the calling shell out of the checks."""
    for name in (
        "APP_MY_SNOWFLAKE_JDBC_URL",
        "APP_MY_SNOWFLAKE_AUTHORIZATION_HEADER",
        "APP_MY_SNOWFLAKE_HASURA_SERVICE_TOKEN_SECRET",
        "HASURA_DDN_PAT",
        "JDBC_SCHEMAS",
        "DDN_CLI",
    ):
        monkeypatch.delenv(name, raising=False)
