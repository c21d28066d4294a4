"""Shared fakes for the collaborator interfaces."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from seqci.collaborators import Collaborators
from seqci.context import ExecutionContext
from seqci.model import RunResult
from seqci.ui.console import Console


class Recorder:
    def __init__(self):
        self.calls: List[tuple] = []


class FakeCheckout:
    def __init__(self, recorder: Recorder, fail: bool = False):
        self.recorder = recorder
        self.fail = fail

    def checkout(self, step, context):
        self.recorder.calls.append(("checkout", step.name))
        if self.fail:
            return RunResult.failure(128, error_kind="provisioning", message="clone failed")
        return RunResult.success(stdout="checked out\n")


class FakeProvisioner:
    def __init__(self, recorder: Recorder, fail: bool = False, bin_dir: str = "/opt/toolchain/bin"):
        self.recorder = recorder
        self.fail = fail
        self.bin_dir = bin_dir

    def provision(self, step, context):
        self.recorder.calls.append(("provision", step.name))
        if self.fail:
            return RunResult.failure(1, error_kind="provisioning", message="rustup failed")
        context.prepend_path(self.bin_dir)
        context.register_toolchain(step.toolchain, step.version)
        return RunResult.success()


class FakeShell:
    def __init__(self, recorder: Recorder, failing: Optional[Dict[str, int]] = None):
        self.recorder = recorder
        self.failing = failing or {}
        self.seen_env: List[Dict[str, str]] = []
        self.seen_timeouts: List[Optional[float]] = []
        self.seen_cwd: List[Optional[str]] = []

    def run(self, command, context, *, cwd=None, env=None, timeout=None):
        self.recorder.calls.append(("run", command))
        self.seen_env.append(context.environ(env))
        self.seen_timeouts.append(timeout)
        self.seen_cwd.append(cwd)
        if command in self.failing:
            code = self.failing[command]
            return RunResult.failure(
                code,
                error_kind="command",
                message=f"exit={code}: {command}",
                stderr=f"{command} failed\n",
            )
        return RunResult.success(stdout=f"{command} ok\n")


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_collaborators(recorder):
    def _make(
        checkout_fails: bool = False,
        provision_fails: bool = False,
        failing: Optional[Dict[str, int]] = None,
    ) -> Collaborators:
        return Collaborators(
            checkout=FakeCheckout(recorder, fail=checkout_fails),
            provision=FakeProvisioner(recorder, fail=provision_fails),
            shell=FakeShell(recorder, failing=failing),
        )

    return _make


@pytest.fixture
def context(tmp_path) -> ExecutionContext:
    return ExecutionContext.fresh(tmp_path)


@pytest.fixture
def console() -> Console:
    return Console(debug=False)
