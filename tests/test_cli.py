"""Tests for argument parsing, configuration precedence and CLI exit codes."""

import json
from unittest.mock import patch

import pytest
import requests
import yaml

from args import parse_args
from cli_config import build_configuration, env_overrides, load_config_file
from common.errors import ConfigurationError, InvalidProtocolError
from constants import Constants, ExitCodes
from depalign import main, run

DA_URL = "http://da.example.com/da/rest/v-1"

BUILD = {
    "group": "org.acme",
    "name": "root",
    "version": "1.0.0",
    "dependencies": [
        {"declared": "org.apache.commons:commons-lang3:3.8", "resolved": "org.apache.commons:commons-lang3:3.8"},
    ],
    "children": [{"name": "core"}],
}


@pytest.fixture
def build_file(tmp_path):
    path = tmp_path / "build.yaml"
    path.write_text(yaml.safe_dump(BUILD), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("DA_URL", "REPOSITORY_GROUP", "VERSION_SUFFIX", "REST_PROTOCOL", "REQUEST_TIMEOUT",
                "IGNORE_UNRESOLVABLE_DEPENDENCIES", "VERSION_MODIFICATION", "STRICT_CONFLICT_RESOLUTION"):
        monkeypatch.delenv("DEPALIGN_" + key, raising=False)


class TestParseArgs:
    """Argument parsing."""

    def test_defaults(self):
        args = parse_args(["-b", "build.yaml"])
        assert args.BUILD == "build.yaml"
        assert args.WORKERS == Constants.DEFAULT_WORKERS
        assert args.LOG_LEVEL == "INFO"
        assert args.IGNORE_UNRESOLVABLE is False
        assert args.DA_URL is None

    def test_build_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_strict_policy_choices(self):
        with pytest.raises(SystemExit):
            parse_args(["-b", "x", "--strict-conflict-resolution", "ignore"])


class TestBuildConfiguration:
    """Configuration sources and precedence."""

    def test_defaults(self):
        config = build_configuration(parse_args(["-b", "x"]), environ={})
        assert config.da_url == Constants.DA_URL
        assert config.repository_group == "DA"
        assert config.version_suffix == "redhat"
        assert config.request_timeout == Constants.REQUEST_TIMEOUT
        assert config.ignore_unresolvable_dependencies is False
        assert config.version_modification_enabled is True

    def test_file_then_env_then_cli(self, tmp_path):
        config_file = tmp_path / "depalign.yml"
        config_file.write_text(yaml.safe_dump({"alignment": {
            "daUrl": "http://from-file/da",
            "repositoryGroup": "FILE",
            "versionSuffix": "file",
            "requestTimeout": 12,
        }}), encoding="utf-8")
        environ = {"DEPALIGN_REPOSITORY_GROUP": "ENV", "DEPALIGN_VERSION_SUFFIX": "env"}
        args = parse_args(["-b", "x", "-c", str(config_file), "--version-suffix", "cli"])

        config = build_configuration(args, environ=environ)

        assert config.da_url == "http://from-file/da"
        assert config.repository_group == "ENV"
        assert config.version_suffix == "cli"
        assert config.request_timeout == 12.0

    def test_json_config(self, tmp_path):
        config_file = tmp_path / "depalign.json"
        config_file.write_text(json.dumps({"ignoreUnresolvableDependencies": True}), encoding="utf-8")
        assert load_config_file(str(config_file)) == {"ignore_unresolvable_dependencies": True}

    def test_env_booleans(self):
        config = build_configuration(
            parse_args(["-b", "x"]),
            environ={"DEPALIGN_IGNORE_UNRESOLVABLE_DEPENDENCIES": "yes", "DEPALIGN_VERSION_MODIFICATION": "false"},
        )
        assert config.ignore_unresolvable_dependencies is True
        assert config.version_modification_enabled is False

    def test_env_overrides_skip_blank(self):
        assert env_overrides({"DEPALIGN_DA_URL": "  "}) == {}

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_configuration(parse_args(["-b", "x", "-c", str(tmp_path / "nope.yml")]), environ={})

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            build_configuration(parse_args(["-b", "x"]), environ={"DEPALIGN_REQUEST_TIMEOUT": "soon"})
        with pytest.raises(ConfigurationError):
            build_configuration(parse_args(["-b", "x", "--request-timeout", "0"]), environ={})
        with pytest.raises(ConfigurationError):
            build_configuration(parse_args(["-b", "x"]), environ={"DEPALIGN_STRICT_CONFLICT_RESOLUTION": "ignore"})

    def test_unknown_protocol(self):
        with pytest.raises(InvalidProtocolError):
            build_configuration(parse_args(["-b", "x", "--rest-protocol", "legacy"]), environ={})


class TestRun:
    """Exit codes of a full CLI run."""

    def test_success(self, build_file, tmp_path, fake_da):
        fake_da.best_matches["org.apache.commons:commons-lang3:3.8"] = "3.8-redhat-00001"
        args = parse_args(["-b", str(build_file), "--da-url", DA_URL])

        assert run(args) == ExitCodes.SUCCESS.value

        data = json.loads((tmp_path / "manipulation.json").read_text(encoding="utf-8"))
        assert data["version"] == "1.0.0.redhat-00001"
        assert data["alignedDependencies"]["org.apache.commons:commons-lang3:3.8"]["version"] == "3.8-redhat-00001"

    def test_output_dir(self, build_file, tmp_path, fake_da):
        out = tmp_path / "out"
        out.mkdir()
        args = parse_args(["-b", str(build_file), "--da-url", DA_URL, "-o", str(out)])
        assert run(args) == ExitCodes.SUCCESS.value
        assert (out / "manipulation.json").exists()

    def test_missing_build_file(self, tmp_path):
        args = parse_args(["-b", str(tmp_path / "missing.yaml"), "--da-url", DA_URL])
        assert run(args) == ExitCodes.FILE_ERROR.value

    def test_connection_error(self, build_file):
        args = parse_args(["-b", str(build_file), "--da-url", DA_URL])
        with patch("common.http_client.requests.post", side_effect=requests.ConnectionError("refused")):
            assert run(args) == ExitCodes.CONNECTION_ERROR.value

    def test_unresolved_dependency(self, tmp_path, fake_da):
        build = dict(BUILD, dependencies=[{"declared": "org.acme:missing:1.0"}])
        path = tmp_path / "build.yaml"
        path.write_text(yaml.safe_dump(build), encoding="utf-8")
        args = parse_args(["-b", str(path), "--da-url", DA_URL])
        assert run(args) == ExitCodes.ALIGNMENT_ERROR.value

    def test_main_exits_with_code(self, build_file, fake_da):
        with pytest.raises(SystemExit) as exc:
            main(["-b", str(build_file), "--da-url", DA_URL])
        assert exc.value.code == ExitCodes.SUCCESS.value
