# collaborators/shell.py
from __future__ import annotations

import subprocess
from typing import Dict, List, Optional

from .. import settings
from ..context import ExecutionContext
from ..errors import CommandFailure
from ..model import RunResult

TIMEOUT_EXIT_CODE = 124  # same code coreutils `timeout` uses


def _tail(text: str | bytes | None, limit: int) -> str:
    if not text:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return text[-limit:]


class ShellRunner:
    """
    Run a literal command string in the workspace and capture its output.

    Never raises on a non-zero exit: the caller inspects the RunResult.
    A missing working directory raises CommandFailure, since there is no
    process to report an exit status for.
    """

    def __init__(self, output_tail: int | None = None):
        self.output_tail = settings.OUTPUT_TAIL if output_tail is None else output_tail

    def run(
        self,
        command: str | List[str],
        context: ExecutionContext,
        *,
        cwd: str | None = None,
        env: Optional[Dict[str, str]] = None,
        timeout: float | None = None,
    ) -> RunResult:
        workdir = context.resolve_cwd(cwd)
        cmd_text = command if isinstance(command, str) else " ".join(command)
        if not workdir.is_dir():
            raise CommandFailure(
                f"working directory not found: {workdir}",
                cmd=cmd_text,
                exit_code=127,
            )

        try:
            proc = subprocess.run(
                command,
                shell=isinstance(command, str),
                cwd=str(workdir),
                env=context.environ(env),
                text=True,
                errors="replace",
                capture_output=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            stderr = _tail(e.stderr, self.output_tail) + f"\nTimeout expired after {timeout}s.\n"
            return RunResult.failure(
                TIMEOUT_EXIT_CODE,
                error_kind="command",
                message=f"timed out after {timeout}s: {cmd_text}",
                stdout=_tail(e.stdout, self.output_tail),
                stderr=stderr,
            )
        except FileNotFoundError as e:
            # shell=False and the executable is missing
            raise CommandFailure(str(e), cmd=cmd_text, exit_code=127) from e

        stdout = _tail(proc.stdout, self.output_tail)
        stderr = _tail(proc.stderr, self.output_tail)
        if proc.returncode != 0:
            return RunResult.failure(
                proc.returncode,
                error_kind="command",
                message=f"exit={proc.returncode}: {cmd_text}",
                stdout=stdout,
                stderr=stderr,
            )
        return RunResult.success(stdout=stdout, stderr=stderr)
