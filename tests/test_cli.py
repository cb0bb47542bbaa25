import json

import pytest
from typer.testing import CliRunner

from dockbuilder import cli_utils
from dockbuilder.cli import app

from tests.conftest import RecordingBuildService

runner = CliRunner()


@pytest.fixture
def project_dir(tmp_path):
    (tmp_path / "Dockerfile").write_text("FROM alpine\n")
    (tmp_path / "dockbuilder.json").write_text(json.dumps({
        "project": {"group": "acme", "artifact": "web", "version": "1.0"},
    }))
    return tmp_path


@pytest.fixture
def fake_service(monkeypatch):
    service = RecordingBuildService()
    monkeypatch.setattr(cli_utils, "get_build_service", lambda auto_pull=None: service)
    return service


def test_build_auto_detected_image(project_dir, fake_service):
    result = runner.invoke(app, ["build", str(project_dir)])
    assert result.exit_code == 0, result.output
    assert fake_service.sequence == [("build", "acme/web:1.0"), ("tag", "acme/web:1.0")]
    assert (project_dir / "target" / "docker" / "build.timestamp").exists()


def test_build_with_overrides(project_dir, fake_service):
    result = runner.invoke(app, [
        "build", str(project_dir), "--skip-tag", "-n", "custom:2", "--pull-policy", "Always",
        "--build-arg", "A=1", "--build-arg", "broken",
    ])
    assert result.exit_code == 0, result.output
    assert fake_service.sequence == [("build", "custom:2")]
    _, _, pull_policy, context = fake_service.calls[0]
    assert pull_policy == "Always"
    assert context.build_args == {"A": "1"}


def test_skip_tag_from_environment(project_dir, fake_service):
    result = runner.invoke(app, ["build", str(project_dir)], env={"DOCKBUILDER_SKIP_TAG": "1"})
    assert result.exit_code == 0, result.output
    assert fake_service.sequence == [("build", "acme/web:1.0")]


def test_skip_build_never_connects(project_dir, monkeypatch):
    def fail(auto_pull=None):
        raise AssertionError("docker must not be contacted")

    monkeypatch.setattr(cli_utils, "get_build_service", fail)
    result = runner.invoke(app, ["build", str(project_dir), "--skip-build"])
    assert result.exit_code == 0, result.output
    assert not (project_dir / "target").exists()


def test_build_failure_exits_non_zero(project_dir, monkeypatch):
    service = RecordingBuildService(fail_build={"acme/web:1.0"})
    monkeypatch.setattr(cli_utils, "get_build_service", lambda auto_pull=None: service)
    result = runner.invoke(app, ["build", str(project_dir)])
    assert result.exit_code == 1
    assert service.sequence == [("build", "acme/web:1.0")]


def test_invalid_config_exits_non_zero(tmp_path, fake_service):
    (tmp_path / "dockbuilder.json").write_text(json.dumps({"build": {"skip": "no"}}))
    result = runner.invoke(app, ["build", str(tmp_path)])
    assert result.exit_code == 1
    assert fake_service.calls == []


def test_empty_project_builds_nothing(tmp_path, fake_service):
    result = runner.invoke(app, ["build", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert fake_service.calls == []


def test_targets_lists_resolved_images(tmp_path):
    (tmp_path / "web").mkdir()
    (tmp_path / "dockbuilder.json").write_text(json.dumps({
        "build": {"pull_policy": "Never"},
        "images": [
            {"name": "acme/web:1.0", "alias": "web", "build": {"dockerfile_dir": "web"}},
            {"name": "acme/worker:1.0", "build": {"dockerfile": "Dockerfile", "skip": True}},
            {"name": "redis:7"},
        ],
    }))
    result = runner.invoke(app, ["targets", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "[web] acme/web:1.0" in result.output
    assert "Never" in result.output
    assert "acme/worker:1.0" in result.output
    assert "redis:7" in result.output


@pytest.fixture
def invalid_image_dir(tmp_path):
    def _write(build_section=None):
        (tmp_path / "dockbuilder.json").write_text(json.dumps({
            "build": build_section or {},
            "images": [{"name": "x", "build": {"cleanup": "bogus"}}],
        }))
        return tmp_path

    return _write


@pytest.fixture
def no_docker(monkeypatch):
    def fail(auto_pull=None):
        raise AssertionError("docker must not be contacted")

    monkeypatch.setattr(cli_utils, "get_build_service", fail)


def test_skip_build_in_config_ignores_invalid_images(invalid_image_dir, no_docker):
    project = invalid_image_dir({"skip": True})
    result = runner.invoke(app, ["build", str(project)])
    assert result.exit_code == 0, result.output
    assert not (project / "target").exists()


@pytest.mark.parametrize("args, env", [
    (["--skip-build"], {}),
    ([], {"DOCKBUILDER_SKIP_BUILD": "1"}),
])
def test_skip_build_flag_ignores_invalid_images(invalid_image_dir, no_docker, args, env):
    project = invalid_image_dir()
    result = runner.invoke(app, ["build", str(project), *args], env=env)
    assert result.exit_code == 0, result.output


def test_invalid_image_exits_non_zero(invalid_image_dir, fake_service):
    result = runner.invoke(app, ["build", str(invalid_image_dir())])
    assert result.exit_code == 1
    assert fake_service.calls == []


def test_ill_typed_image_is_configuration_error(tmp_path, fake_service):
    (tmp_path / "dockbuilder.json").write_text(json.dumps({
        "images": [
            {"name": "ok", "build": {"dockerfile": "Dockerfile"}},
            {"name": "x", "build": {"dockerfile": 5}},
        ],
    }))
    result = runner.invoke(app, ["build", str(tmp_path)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert fake_service.calls == []
