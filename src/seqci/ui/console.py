"""Console output formatting utilities for seqci."""

from __future__ import annotations

import sys
import traceback
from typing import Optional

from ..model import RunResult


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        repository: str,
        workflow: str,
        job_count: int,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Repository: {repository}")
        print(f"Workflow: {workflow}")
        print(f"Jobs: {job_count}")
        print()

    def print_job_start(self, name: str, runs_on: str | None = None) -> None:
        print(f"\nJOB STARTED: {name}")
        if runs_on:
            print(f"Runs on: {runs_on}")

    def print_step(self, name: str, position: int, total: int) -> None:
        print(f"STEP {position}/{total}: {name}")

    def print_success(self, name: str) -> None:
        print("STATUS: success")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        position: Optional[int] = None,
        output: str = "",
        is_job: bool = False,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Job or step name
            reason: Failure reason/error message
            exit_code: Optional exit code
            position: Optional 1-based step position
            output: Captured diagnostic output of the failing step
            is_job: If True, print "JOB FAILED", otherwise "STEP FAILED"
        """
        prefix = "JOB FAILED" if is_job else "STEP FAILED"
        label = f"{name} (step {position})" if position is not None else name
        print(f"{prefix}: {label}")
        if exit_code is not None:
            print(f"Exit code: {exit_code}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}")
        if output.strip():
            print(output.rstrip())

    def print_step_result(self, result: RunResult) -> None:
        if result.ok:
            self.print_success(result.step_name or "")
            return
        self.print_failure(
            result.step_name or "",
            result.message or "",
            exit_code=result.exit_code,
            position=result.position,
            output=result.stderr or result.stdout,
        )

    def print_plan_job(self, name: str, reason: str) -> None:
        """Print job selection plan."""
        print(f"  {name} ({reason})")

    def print_plan_job_skipped(self, name: str, reason: str) -> None:
        """Print job skipped in plan."""
        print(f"  {name} (skipped: {reason})")

    def print_results(self, results: dict[str, RunResult]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for job, result in results.items():
            if result.ok:
                print(f"  {job}: SUCCESS ({result.steps_run} steps)")
            else:
                print(f"  {job}: FAILED at step {result.position} ({result.step_name})")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
