# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from .model import RunResult


@dataclass(eq=False)
class CIError(Exception):
    """
    Structured CI error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    job: str
    step: str | None
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.job:
            lines.append(f"job={self.job}")
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigurationError(CIError):
    """The job cannot run at all: no steps, unknown action, unusable workspace."""

    def __init__(self, message: str, *, job: str = "", step: str | None = None, **details: Any):
        super().__init__(kind="configuration", job=job, step=step, message=message, details=details)


class ProvisioningFailure(CIError):
    """A checkout or toolchain collaborator reported failure."""

    def __init__(
        self,
        message: str,
        *,
        job: str = "",
        step: str | None = None,
        exit_code: int = 1,
        **details: Any,
    ):
        super().__init__(kind="provisioning", job=job, step=step, message=message, details=details)
        self.exit_code = exit_code

    @classmethod
    def from_result(cls, result: RunResult, job: str = "") -> ProvisioningFailure:
        return cls(
            result.message or "provisioning failed",
            job=job,
            step=result.step_name,
            exit_code=result.exit_code,
        )


class CommandFailure(CIError):
    """A run step exited non-zero (or timed out)."""

    def __init__(
        self,
        message: str,
        *,
        job: str = "",
        step: str | None = None,
        cmd: str | None = None,
        exit_code: int = 1,
        stdout: str = "",
        stderr: str = "",
    ):
        details: Dict[str, Any] = {"exit_code": exit_code}
        if cmd is not None:
            details["cmd"] = cmd
        super().__init__(kind="command", job=job, step=step, message=message, details=details)
        self.cmd = cmd
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    @classmethod
    def from_result(cls, result: RunResult, job: str = "") -> CommandFailure:
        return cls(
            result.message or f"command failed (exit={result.exit_code})",
            job=job,
            step=result.step_name,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
        )


_BY_KIND: Dict[str, Type[CIError]] = {
    "provisioning": ProvisioningFailure,
    "command": CommandFailure,
}


def error_for_kind(kind: Optional[str]) -> Type[CIError]:
    # results without an error kind come from a command step
    return _BY_KIND.get(kind or "command", CommandFailure)
