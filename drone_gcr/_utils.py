from __future__ import annotations

import logging
import subprocess
from typing import Any, Iterable, Literal, Sequence

logger = logging.getLogger(__name__)

REDACTED = "********"


def format_command(cmd: Sequence[str], redact: Iterable[str] = ()) -> str:
    """Join a command for display, masking any argument listed in ``redact``."""
    secrets = {value for value in redact if value}
    return " ".join(REDACTED if part in secrets else part for part in cmd)


def trace(cmd: Sequence[str], redact: Iterable[str] = ()) -> None:
    logger.info("$ %s", format_command(cmd, redact))


def run_logged(
    cmd: Iterable[str],
    *,
    output: Literal["forward", "discard"] = "forward",
    check: bool = True,
    echo: bool = True,
    redact: Iterable[str] = (),
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess after echoing it as a ``$ cmd`` trace line.
    output="forward" shares our stdout/stderr with the child, "discard" drops both.
    Raises CalledProcessError (with secrets masked) when check=True.
    """
    cmd_list = list(cmd)
    masked = tuple(redact)
    if echo:
        trace(cmd_list, masked)

    stream = None if output == "forward" else subprocess.DEVNULL
    result = subprocess.run(
        cmd_list,
        stdout=stream,
        stderr=stream,
        text=True,
        **kwargs,
    )
    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, format_command(cmd_list, masked)
        )
    return result
