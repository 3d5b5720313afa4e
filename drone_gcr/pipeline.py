"""Sequential runner for the external commands of a publish."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from ._utils import format_command, run_logged

logger = logging.getLogger(__name__)

# Exit status a shell reports for a command it could not execute.
NOT_EXECUTABLE = 127


@dataclass(frozen=True)
class Step:
    name: str
    args: tuple[str, ...] = field(repr=False)
    failure_message: str
    redact: tuple[str, ...] = field(default=(), repr=False)

    @property
    def command(self) -> str:
        return format_command(self.args, self.redact)


@dataclass(frozen=True)
class StepResult:
    step: Step
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


StepRunner = Callable[[Step], StepResult]


def subprocess_runner(cwd: Path | None = None) -> StepRunner:
    """Runner that executes steps in ``cwd`` with output forwarded live."""

    def _run(step: Step) -> StepResult:
        try:
            result = run_logged(
                step.args,
                output="forward",
                check=False,
                redact=step.redact,
                cwd=cwd,
            )
        except OSError as exc:
            logger.error("Unable to run %s: %s", step.args[0], exc)
            return StepResult(step=step, returncode=NOT_EXECUTABLE)
        return StepResult(step=step, returncode=result.returncode)

    return _run


def run_steps(steps: Iterable[Step], runner: StepRunner) -> list[StepResult]:
    """Run steps in order, stopping after the first one that fails."""
    results: list[StepResult] = []
    for step in steps:
        result = runner(step)
        results.append(result)
        if not result.ok:
            logger.debug("Step %s exited with %d", step.name, result.returncode)
            break
    return results
