from __future__ import annotations

import logging
import time
from functools import partial
from pathlib import Path
from typing import Callable

from .daemon import launch_daemon, probe_daemon, wait_for_daemon
from .models import BuildConfig, PushStrategy
from .pipeline import Step, StepResult, StepRunner, run_steps, subprocess_runner
from .settings import EngineSettings

logger = logging.getLogger(__name__)

# Username GCR expects when the password is a service account JSON key.
JSON_KEY_USER = "_json_key"

Launcher = Callable[[str | None, EngineSettings], object]


class PublishError(RuntimeError):
    """Raised when a pipeline step exits non-zero."""

    def __init__(self, result: StepResult) -> None:
        super().__init__(result.step.failure_message)
        self.result = result


def login_step(config: BuildConfig, settings: EngineSettings) -> Step:
    token = config.token.get_secret_value()
    args = [settings.binary, "login", "-u", JSON_KEY_USER, "-p", token]
    if settings.login_email:
        args.extend(["-e", settings.login_email])
    args.append(config.registry)
    return Step(
        name="login",
        args=tuple(args),
        failure_message="Login failed.",
        redact=(token,),
    )


def build_step(config: BuildConfig, settings: EngineSettings) -> Step:
    return Step(
        name="build",
        args=(
            settings.binary,
            "build",
            "--pull=true",
            "--rm=true",
            "-f",
            config.dockerfile,
            "-t",
            config.commit_ref,
            config.context,
        ),
        failure_message="Build failed.",
    )


def tag_steps(config: BuildConfig, settings: EngineSettings) -> list[Step]:
    return [
        Step(
            name=f"tag {reference}",
            args=(settings.binary, "tag", config.commit_ref, reference),
            failure_message=f"Tagging {reference} failed.",
        )
        for reference in config.references()
    ]


def push_steps(config: BuildConfig, settings: EngineSettings) -> list[Step]:
    flags: tuple[str, ...] = ()
    if config.push_strategy is PushStrategy.PER_TAG:
        targets = config.references()
    else:
        targets = [config.repository]
        if settings.push_all_tags:
            flags = ("--all-tags",)
    return [
        Step(
            name=f"push {target}",
            args=(settings.binary, "push", *flags, target),
            failure_message=f"Push of {target} failed.",
        )
        for target in targets
    ]


def plan_steps(config: BuildConfig, settings: EngineSettings) -> list[Step]:
    """Ordered commands for one publish: login, build, tag(s), push(es)."""
    return [
        login_step(config, settings),
        build_step(config, settings),
        *tag_steps(config, settings),
        *push_steps(config, settings),
    ]


def publish(
    config: BuildConfig,
    settings: EngineSettings,
    *,
    runner: StepRunner | None = None,
    check: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    launcher: Launcher = launch_daemon,
) -> list[StepResult]:
    """
    Start the daemon, wait for it (best effort) and run the publish pipeline.
    Raises PublishError for the first failed step; nothing after it runs.
    """
    launcher(config.storage_driver, settings)

    if wait_for_daemon(check or partial(probe_daemon, settings), sleep=sleep):
        logger.debug("Docker daemon is ready")

    results = run_steps(
        plan_steps(config, settings), runner or subprocess_runner(Path.cwd())
    )
    for result in results:
        if not result.ok:
            raise PublishError(result)

    logger.info("Published %s", ", ".join(config.references()))
    return results
