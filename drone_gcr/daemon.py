"""Docker daemon launch and readiness polling."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Callable

from tenacity import (  # type: ignore[import-not-found]
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from ._utils import run_logged, trace
from .settings import EngineSettings

logger = logging.getLogger(__name__)

READINESS_ATTEMPTS = 3
READINESS_DELAY_SECONDS = 5


def daemon_command(storage_driver: str | None, settings: EngineSettings) -> list[str]:
    args = [settings.binary, settings.daemon_command]
    if storage_driver:
        args.extend(["-s", storage_driver])
    return args


def launch_daemon(
    storage_driver: str | None, settings: EngineSettings
) -> subprocess.Popen[bytes] | None:
    """
    Start the engine daemon in the background and return without waiting.
    The process is never joined; CI tears it down with the job.
    """
    cmd = daemon_command(storage_driver, settings)
    trace(cmd)
    stream = None if settings.launch_debug else subprocess.DEVNULL
    try:
        return subprocess.Popen(cmd, stdout=stream, stderr=stream)
    except OSError as exc:
        # Surfaces later through the readiness poll and login.
        logger.warning("Unable to launch Docker daemon: %s", exc)
        return None


def probe_daemon(settings: EngineSettings) -> bool:
    try:
        run_logged([settings.binary, "info"], output="discard", echo=False)
    except (subprocess.CalledProcessError, OSError):
        return False
    return True


def _give_up(retry_state: RetryCallState) -> bool:
    logger.warning(
        "Docker daemon not ready after %d attempts; continuing anyway",
        retry_state.attempt_number,
    )
    return False


def wait_for_daemon(
    check: Callable[[], bool],
    *,
    sleep: Callable[[float], None] = time.sleep,
    attempts: int = READINESS_ATTEMPTS,
    delay: float = READINESS_DELAY_SECONDS,
) -> bool:
    """Poll ``check`` until it succeeds or ``attempts`` run out.

    Waits a fixed ``delay`` between failed attempts. Exhaustion is not an
    error: the caller proceeds and the first real engine command reports
    the problem.

    Args:
        check: Returns True once the daemon answers
        sleep: Blocking sleep used between attempts
        attempts: Maximum number of checks
        delay: Seconds to wait after a failed check

    Returns:
        True if the daemon answered, False if every attempt failed
    """
    retryer = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        retry=retry_if_result(lambda ready: not ready),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.DEBUG),
        retry_error_callback=_give_up,
    )
    return retryer(check)
