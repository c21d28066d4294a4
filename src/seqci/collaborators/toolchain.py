# collaborators/toolchain.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, List

from ..context import ExecutionContext
from ..errors import CommandFailure, ConfigurationError
from ..model import Provision, RunResult
from .shell import ShellRunner

TOOL_HINTS = {
    "rustup": "Install rustup (https://rustup.rs) or fix PATH.",
}


# ---------------------------------------------------------------------
# Installer plans: toolchain params -> list of commands
# ---------------------------------------------------------------------

def _rust_plan(step: Provision) -> List[List[str]]:
    install = ["rustup", "toolchain", "install", step.version, "--profile", "minimal"]
    for component in step.components:
        install.extend(["--component", component])
    cmds = [install]
    if step.override:
        # pins the toolchain for the workspace directory
        cmds.append(["rustup", "override", "set", step.version])
    return cmds


def _rust_bin_dir() -> Path:
    cargo_home = os.environ.get("CARGO_HOME")
    if cargo_home:
        return Path(cargo_home) / "bin"
    return Path.home() / ".cargo" / "bin"


INSTALLERS: Dict[str, Callable[[Provision], List[List[str]]]] = {
    "rust": _rust_plan,
}

BIN_DIRS: Dict[str, Callable[[], Path]] = {
    "rust": _rust_bin_dir,
}


class ToolchainInstaller:
    """
    Install a named toolchain version plus components, then make it
    available to later steps (PATH + toolchain registry on the context).

    Commands go through an injected CommandRunner so the installer can be
    exercised without touching the machine.
    """

    def __init__(self, shell: ShellRunner | None = None):
        self.shell = shell or ShellRunner()

    def validate(self, step: Provision) -> None:
        if step.toolchain not in INSTALLERS:
            raise ConfigurationError(
                f"unknown toolchain {step.toolchain!r}",
                step=step.name,
                known=sorted(INSTALLERS),
            )

    def provision(self, step: Provision, context: ExecutionContext) -> RunResult:
        self.validate(step)
        plan = INSTALLERS[step.toolchain]

        # the installer binary usually lives in the toolchain's bin dir
        bin_dir = BIN_DIRS[step.toolchain]()
        env = {"PATH": os.pathsep.join([str(bin_dir), context.environ().get("PATH", "")])}

        stdout: List[str] = []
        stderr: List[str] = []
        for cmd in plan(step):
            try:
                result = self.shell.run(cmd, context, env=env, timeout=context.step_timeout)
            except CommandFailure as e:
                # executable missing altogether
                result = RunResult.failure(e.exit_code, error_kind="provisioning", stderr=e.message)
            stdout.append(result.stdout)
            stderr.append(result.stderr)
            if not result.ok:
                tool = cmd[0]
                message = f"{' '.join(cmd)} failed (exit={result.exit_code})"
                if result.exit_code == 127 and tool in TOOL_HINTS:
                    message = f"{message}. Hint: {TOOL_HINTS[tool]}"
                return RunResult.failure(
                    result.exit_code,
                    error_kind="provisioning",
                    message=message,
                    stdout="".join(stdout),
                    stderr="".join(stderr),
                )

        context.prepend_path(bin_dir)
        context.register_toolchain(step.toolchain, step.version)
        return RunResult.success(stdout="".join(stdout), stderr="".join(stderr))
