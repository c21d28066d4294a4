# src/seqci/dsl.py
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .errors import ConfigurationError
from .model import Checkout, Job, Provision, RunCommand, Step, Trigger


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(
    name: str,
    cmd: str,
    *,
    cwd: str | None = None,
    env: Optional[Dict[str, str]] = None,
    timeout: float | None = None,
) -> RunCommand:
    """Create a shell step."""
    return RunCommand(
        name=name,
        run=cmd,
        cwd=cwd,
        env={k: str(v) for k, v in env.items()} if env else None,
        timeout=timeout,
    )


def checkout(
    name: str = "Checkout source",
    *,
    repository: str | None = None,
    ref: str | None = None,
) -> Checkout:
    return Checkout(name=name, repository=repository, ref=ref)


def toolchain(
    name: str,
    toolchain: str = "rust",
    version: str = "stable",
    *,
    components: Iterable[str] = (),
    override: bool = False,
) -> Provision:
    return Provision(
        name=name,
        toolchain=toolchain,
        version=version,
        components=tuple(components),
        override=override,
    )


# ---------------------------------------------------------------------
# Hosted-CI action references ("uses: owner/action@version")
# ---------------------------------------------------------------------

def _split_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    return tuple(str(v) for v in value)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _checkout_action(name: str, version: str, params: Dict[str, Any]) -> Step:
    return checkout(name, repository=params.get("repository"), ref=params.get("ref"))


def _actions_rs_toolchain(name: str, version: str, params: Dict[str, Any]) -> Step:
    return toolchain(
        name,
        "rust",
        str(params.get("toolchain", "stable")),
        components=_split_list(params.get("components")),
        override=_truthy(params.get("override", False)),
    )


def _dtolnay_toolchain(name: str, version: str, params: Dict[str, Any]) -> Step:
    # dtolnay/rust-toolchain encodes the toolchain in the action version
    return toolchain(
        name,
        "rust",
        str(params.get("toolchain", version or "stable")),
        components=_split_list(params.get("components")),
    )


ACTIONS: Dict[str, Callable[[str, str, Dict[str, Any]], Step]] = {
    "actions/checkout": _checkout_action,
    "actions-rs/toolchain": _actions_rs_toolchain,
    "dtolnay/rust-toolchain": _dtolnay_toolchain,
}


def uses(action: str, name: str | None = None, with_: Optional[Dict[str, Any]] = None) -> Step:
    """
    Translate an action reference such as "actions/checkout@v4" into the
    matching step.

        uses("actions-rs/toolchain@v1", "Install Rust",
             with_={"toolchain": "stable", "components": "clippy", "override": True})
    """
    ref, _, version = action.partition("@")
    factory = ACTIONS.get(ref)
    if factory is None:
        raise ConfigurationError(
            f"unknown action {action!r}",
            step=name,
            known=sorted(ACTIONS),
        )
    return factory(name or ref, version, dict(with_ or {}))


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

def on_push(*branches: str) -> Trigger:
    return Trigger(event="push", branches=tuple(branches))


def on_pull_request(*branches: str) -> Trigger:
    return Trigger(event="pull_request", branches=tuple(branches))


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *steps: Step,  # allow: job("x", sh(...), sh(...))
    steps_list: Optional[List[Step]] = None,  # allow: job("x", steps_list=[...])
    runs_on: str = "local",
    on: Optional[Sequence[Trigger]] = None,
    env: Optional[Dict[str, str]] = None,
) -> Job:
    steps_final: List[Step] = []
    if steps_list:
        steps_final.extend(list(steps_list))
    steps_final.extend(list(steps))

    if not steps_final:
        raise ConfigurationError(f"job({name!r}) must have at least one step", job=name)

    return Job(
        name=name,
        steps=tuple(steps_final),
        runs_on=runs_on,
        triggers=list(on or []),
        env={k: str(v) for k, v in (env or {}).items()},
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._steps: list[Step] = []
        self._runs_on: str = "local"
        self._triggers: list[Trigger] = []
        self._env: dict[str, str] = {}

    def runs_on(self, label: str):
        self._runs_on = label
        return self

    def on(self, *triggers: Trigger):
        self._triggers.extend(triggers)
        return self

    def with_env(self, **env):
        # force values to str for env compatibility
        self._env.update({k: str(v) for k, v in env.items()})
        return self

    def add_step(self, step: Step):
        self._steps.append(step)
        return self

    def define_step(self, name: str, run: str, cwd: str | None = None):
        return self.add_step(sh(name, run, cwd=cwd))

    def build(self) -> Job:
        if not self._steps:
            raise ConfigurationError(f"Job '{self.name}' has no steps", job=self.name)
        return Job(
            name=self.name,
            steps=tuple(self._steps),
            runs_on=self._runs_on,
            triggers=list(self._triggers),
            env=dict(self._env),
        )


def build(name: str) -> JobBuilder:
    """Convenience: build('test').define_step(...).build()"""
    return JobBuilder(name)


# ---------------------------------------------------------------------
# Workflow helper (single-file story)
# ---------------------------------------------------------------------

def wf(*jobs: Job) -> List[Job]:
    """
    Workflow definition helper.

        from seqci import wf, job, sh

        def workflow():
            return wf(
                job(...),
                job(...),
            )

    Or use JOBS directly:
        JOBS = wf(job(...), job(...))
    """
    return list(jobs)


workflow = wf  # alias (avoid naming your own function workflow if you use it)
