"""
External services a step delegates to.

The executor only knows these three capabilities; real implementations
touch git, rustup and the shell, tests substitute fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from ..context import ExecutionContext
from ..model import Checkout, Provision, RunResult
from .checkout import GitCheckout
from .shell import ShellRunner
from .toolchain import ToolchainInstaller


class CheckoutService(Protocol):
    def checkout(self, step: Checkout, context: ExecutionContext) -> RunResult: ...


class ToolchainProvisioner(Protocol):
    def provision(self, step: Provision, context: ExecutionContext) -> RunResult: ...


class CommandRunner(Protocol):
    def run(
        self,
        command: str | List[str],
        context: ExecutionContext,
        *,
        cwd: str | None = None,
        env: Optional[Dict[str, str]] = None,
        timeout: float | None = None,
    ) -> RunResult: ...


@dataclass
class Collaborators:
    checkout: CheckoutService
    provision: ToolchainProvisioner
    shell: CommandRunner

    @classmethod
    def default(cls, output_tail: int | None = None) -> Collaborators:
        shell = ShellRunner(output_tail=output_tail)
        return cls(
            checkout=GitCheckout(),
            provision=ToolchainInstaller(shell),
            shell=shell,
        )


__all__ = [
    "CheckoutService",
    "ToolchainProvisioner",
    "CommandRunner",
    "Collaborators",
    "GitCheckout",
    "ShellRunner",
    "ToolchainInstaller",
]
