"""Tests for settings and env file loading."""

import json
import os

import pytest
import yaml

from pipeline.settings import load_connector_configuration, load_env_file, load_settings


def test_defaults_describe_standard_layout(monkeypatch):
    monkeypatch.delenv("DDN_CLI", raising=False)

    settings = load_settings()

    assert settings.connector_dir == "app/connector/my_snowflake"
    assert settings.connector_configuration == "app/connector/my_snowflake/configuration.json"
    assert "azure-pipelines.yml" in settings.required_files
    assert settings.ddn_executable == "ddn"


def test_load_yaml_settings(tmp_path):
    config_file = tmp_path / "pipeline.yml"
    with open(config_file, 'w') as f:
        yaml.dump({"connector_name": "warehouse", "trigger_branches": ["main", "release"]}, f)

    settings = load_settings(config_file)

    assert settings.connector_dir == "app/connector/warehouse"
    assert settings.trigger_branches == ["main", "release"]


def test_load_json_settings(tmp_path):
    config_file = tmp_path / "pipeline.json"
    config_file.write_text(json.dumps({"build_list_limit": 10}))

    assert load_settings(config_file).build_list_limit == 10


def test_unsupported_settings_format(tmp_path):
    config_file = tmp_path / "pipeline.toml"
    config_file.write_text("connector_name = 'x'\n")

    with pytest.raises(ValueError):
        load_settings(config_file)


def test_missing_settings_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yml")


def test_cli_override(monkeypatch):
    monkeypatch.setenv("DDN_CLI", "/opt/ddn/bin/ddn")

    assert load_settings().ddn_executable == "/opt/ddn/bin/ddn"


def test_load_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# Snowflake\n"
        "APP_MY_SNOWFLAKE_JDBC_URL=\"jdbc:snowflake://acme?user=svc\"\n"
        "EMPTY=\n"
        "export JDBC_SCHEMAS=PUBLIC\n"
    )

    env = load_env_file(env_file)

    assert env["APP_MY_SNOWFLAKE_JDBC_URL"] == "jdbc:snowflake://acme?user=svc"
    assert env["EMPTY"] == ""
    assert env["JDBC_SCHEMAS"] == "PUBLIC"


def test_load_env_file_does_not_touch_environ(tmp_path, monkeypatch):
    monkeypatch.delenv("ONLY_IN_FILE", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("ONLY_IN_FILE=1\n")

    load_env_file(env_file)

    assert "ONLY_IN_FILE" not in os.environ


def test_missing_env_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_env_file(tmp_path / ".env")


def test_connector_configuration_extra_fields(tmp_path):
    config_file = tmp_path / "configuration.json"
    config_file.write_text(json.dumps({
        "version": "v1",
        "jdbc_url": {"variable": "JDBC_URL"},
        "tables": [{"name": "ORDERS"}],
    }))

    configuration = load_connector_configuration(config_file)

    assert configuration.table_count == 1


def test_connector_configuration_without_tables(tmp_path):
    config_file = tmp_path / "configuration.json"
    config_file.write_text("{}")

    assert load_connector_configuration(config_file).table_count == 0


def test_connector_configuration_must_be_object(tmp_path):
    config_file = tmp_path / "configuration.json"
    config_file.write_text("[]")

    with pytest.raises(ValueError):
        load_connector_configuration(config_file)


def test_malformed_yaml_settings(tmp_path):
    config_file = tmp_path / "pipeline.yml"
    config_file.write_text("connector_name: [unclosed\n")

    with pytest.raises(ValueError, match="Invalid settings file"):
        load_settings(config_file)


def test_null_tables_count_as_zero(tmp_path):
    config_file = tmp_path / "configuration.json"
    config_file.write_text(json.dumps({"tables": None}))

    assert load_connector_configuration(config_file).table_count == 0
