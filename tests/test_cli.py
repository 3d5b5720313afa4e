from __future__ import annotations

import logging
from typing import Any

import pytest
from typer.testing import CliRunner

from drone_gcr import __version__, cli
from drone_gcr.models import BuildConfig, PushStrategy
from drone_gcr.pipeline import Step, StepResult
from drone_gcr.publish import PublishError

runner = CliRunner()

PLUGIN_ENV = {
    "PLUGIN_REPO": "myorg/app",
    "PLUGIN_TOKEN": "key-json\n",
    "PLUGIN_TAG": "v1,v2",
    "DRONE_COMMIT": "abc123",
}


@pytest.fixture
def published(monkeypatch: pytest.MonkeyPatch) -> list[BuildConfig]:
    configs: list[BuildConfig] = []

    def fake_publish(config: BuildConfig, settings: Any) -> list[StepResult]:
        configs.append(config)
        return []

    monkeypatch.setattr(cli, "publish", fake_publish)
    return configs


def test_reads_plugin_environment(published: list[BuildConfig]) -> None:
    result = runner.invoke(cli.app, [], env=PLUGIN_ENV)

    assert result.exit_code == 0, result.output
    config = published[0]
    assert config.repository == "gcr.io/myorg/app"
    assert config.tags == ("v1", "v2")
    assert config.commit_ref == "abc123"
    assert config.token.get_secret_value() == "key-json"
    assert config.push_strategy is PushStrategy.REPOSITORY


def test_legacy_register_variable(published: list[BuildConfig]) -> None:
    env = {**PLUGIN_ENV, "PLUGIN_REGISTER": "eu.gcr.io"}

    result = runner.invoke(cli.app, [], env=env)

    assert result.exit_code == 0, result.output
    assert published[0].repository == "eu.gcr.io/myorg/app"


def test_flags_override_environment(published: list[BuildConfig]) -> None:
    result = runner.invoke(
        cli.app,
        ["--tag", "latest", "--file", "docker/Dockerfile", "--push-strategy", "per-tag"],
        env=PLUGIN_ENV,
    )

    assert result.exit_code == 0, result.output
    config = published[0]
    assert config.tags == ("latest",)
    assert config.dockerfile == "docker/Dockerfile"
    assert config.push_strategy is PushStrategy.PER_TAG


def test_missing_repo_exits_non_zero(published: list[BuildConfig]) -> None:
    env = {**PLUGIN_ENV, "PLUGIN_REPO": ""}

    result = runner.invoke(cli.app, [], env=env)

    assert result.exit_code == 1
    assert published == []


def test_step_failure_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def failing_publish(config: BuildConfig, settings: Any) -> None:
        step = Step(name="login", args=("docker", "login"), failure_message="Login failed.")
        raise PublishError(StepResult(step=step, returncode=1))

    monkeypatch.setattr(cli, "publish", failing_publish)
    caplog.set_level(logging.INFO)

    result = runner.invoke(cli.app, [], env=PLUGIN_ENV)

    assert result.exit_code == 1
    assert "Login failed." in caplog.text


def test_version() -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_logs_banner_and_build_info(
    published: list[BuildConfig], caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO)
    env = {**PLUGIN_ENV, "DRONE_BUILD_NUMBER": "42", "DRONE_BRANCH": "main"}

    result = runner.invoke(cli.app, [], env=env)

    assert result.exit_code == 0, result.output
    assert f"Drone GCR plugin {__version__}" in caplog.text
    assert "Build #42 on main at abc123" in caplog.text
    assert "key-json" not in caplog.text
