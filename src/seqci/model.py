# model.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from fnmatch import fnmatch
from typing import Any, ClassVar, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Step:
    """A single unit of work inside a CI job."""
    name: str

    kind: ClassVar[str] = "step"


@dataclass(frozen=True)
class Checkout(Step):
    """Materialize repository content into the workspace."""
    repository: str | None = None   # None -> the workspace is already the repo
    ref: str | None = None

    kind: ClassVar[str] = "checkout"


@dataclass(frozen=True)
class Provision(Step):
    """Install a named toolchain version plus optional components."""
    toolchain: str = "rust"
    version: str = "stable"
    components: Tuple[str, ...] = ()
    override: bool = False

    kind: ClassVar[str] = "provision"

    def params(self) -> Dict[str, Any]:
        return {
            "name": self.toolchain,
            "version": self.version,
            "components": list(self.components),
            "override": self.override,
        }


@dataclass(frozen=True)
class RunCommand(Step):
    """A literal shell command."""
    run: str = ""
    cwd: str | None = None
    env: Optional[Dict[str, str]] = None
    timeout: float | None = None

    kind: ClassVar[str] = "run"


# ---------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Trigger:
    """An event type plus the branch patterns it applies to."""
    event: str
    branches: Tuple[str, ...] = ()

    def matches(self, event: str, branch: str | None = None) -> bool:
        if event != self.event:
            return False
        if not self.branches:
            return True
        if branch is None:
            return False
        return any(fnmatch(branch, pattern) for pattern in self.branches)


@dataclass
class Job:
    """
    A CI job: an ordered, fixed sequence of steps plus the metadata the
    invoking layer uses to decide whether and where to run it.
    """
    name: str
    steps: Tuple[Step, ...]
    runs_on: str = "local"
    triggers: List[Trigger] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # steps are immutable once the job is built
        self.steps = tuple(self.steps)

    def triggered_by(self, event: str, branch: str | None = None) -> bool:
        if not self.triggers:
            return True
        return any(t.matches(event, branch) for t in self.triggers)

    def to_dict(self) -> Dict[str, Any]:
        steps = []
        for step in self.steps:
            step_dict: Dict[str, Any] = {"kind": step.kind, "name": step.name}
            if isinstance(step, Checkout):
                if step.repository is not None:
                    step_dict["repository"] = step.repository
                if step.ref is not None:
                    step_dict["ref"] = step.ref
            elif isinstance(step, Provision):
                step_dict.update(
                    toolchain=step.toolchain,
                    version=step.version,
                    components=list(step.components),
                    override=step.override,
                )
            elif isinstance(step, RunCommand):
                step_dict["run"] = step.run
                if step.cwd is not None:
                    step_dict["cwd"] = step.cwd
                if step.timeout is not None:
                    step_dict["timeout"] = step.timeout
            steps.append(step_dict)

        return {
            "name": self.name,
            "runs_on": self.runs_on,
            "on": [{"event": t.event, "branches": list(t.branches)} for t in self.triggers],
            "env": dict(self.env),
            "steps": steps,
        }


# ---------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------

class Status:
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one step, or the aggregate outcome of a job."""
    status: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    step_name: str | None = None
    step_index: int | None = None   # 0-based
    error_kind: str | None = None   # "provisioning" | "command" | None
    message: str | None = None
    steps_run: int = 0

    @classmethod
    def success(cls, stdout: str = "", stderr: str = "", **kw) -> RunResult:
        return cls(status=Status.SUCCESS, exit_code=0, stdout=stdout, stderr=stderr, **kw)

    @classmethod
    def failure(
        cls,
        exit_code: int = 1,
        *,
        error_kind: str,
        message: str | None = None,
        stdout: str = "",
        stderr: str = "",
        **kw,
    ) -> RunResult:
        if exit_code == 0:
            exit_code = 1
        return cls(
            status=Status.FAILURE,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            error_kind=error_kind,
            message=message,
            **kw,
        )

    @property
    def ok(self) -> bool:
        return self.status == Status.SUCCESS

    @property
    def position(self) -> int | None:
        """1-based step position, for reporting."""
        return None if self.step_index is None else self.step_index + 1

    def tagged(self, step: Step, index: int, steps_run: int | None = None) -> RunResult:
        return replace(
            self,
            step_name=step.name,
            step_index=index,
            steps_run=index + 1 if steps_run is None else steps_run,
        )

    def raise_for_status(self, job: str = "") -> None:
        if self.ok:
            return
        from .errors import error_for_kind

        raise error_for_kind(self.error_kind).from_result(self, job=job)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "exit_code": self.exit_code,
            "step": self.step_name,
            "position": self.position,
            "steps_run": self.steps_run,
            "error_kind": self.error_kind,
            "message": self.message,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


# ---------------------------------------------------------------------
# Execution state machine
# ---------------------------------------------------------------------

class Phase:
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class PipelineState:
    """
    Pending -> Running(0) -> ... -> Running(last) -> Succeeded
                      Running(i) -> Failed(i)
    Succeeded and Failed are terminal.
    """
    phase: str = Phase.PENDING
    step_index: int | None = None

    @property
    def terminal(self) -> bool:
        return self.phase in (Phase.SUCCEEDED, Phase.FAILED)

    def start(self) -> None:
        if self.phase != Phase.PENDING:
            raise RuntimeError(f"cannot start from {self}")
        self.phase = Phase.RUNNING
        self.step_index = 0

    def advance(self, total: int) -> None:
        if self.phase != Phase.RUNNING:
            raise RuntimeError(f"cannot advance from {self}")
        if self.step_index is None:
            raise RuntimeError(f"running state has no step index: {self}")
        if self.step_index + 1 < total:
            self.step_index += 1
        else:
            self.phase = Phase.SUCCEEDED

    def fail(self) -> None:
        if self.phase != Phase.RUNNING:
            raise RuntimeError(f"cannot fail from {self}")
        self.phase = Phase.FAILED

    def __str__(self) -> str:
        if self.phase in (Phase.RUNNING, Phase.FAILED):
            return f"{self.phase.capitalize()}({self.step_index})"
        return self.phase.capitalize()
