"""Tests for the seqci command line."""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from seqci.cli import cli

PASSING = """
from seqci import wf, job, sh, on_push

def workflow():
    return wf(
        job(
            "build",
            sh("Prepare", "mkdir -p out && echo built > out/artifact.txt"),
            sh("Check", "test -f out/artifact.txt"),
            runs_on="ubuntu-latest",
            on=[on_push("main")],
        ),
    )
"""

FAILING = """
from seqci import wf, job, sh

def workflow():
    return wf(
        job(
            "build",
            sh("Lint", "true"),
            sh("Test", "echo broken; exit 4"),
            sh("Never", "touch never-ran"),
        ),
    )
"""


@pytest.fixture
def runner():
    return CliRunner()


def _write_workflow(body: str, name: str = "seqci_workflow.py") -> None:
    Path(name).write_text(textwrap.dedent(body))


class TestRun:
    def test_success_exits_zero(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING)
            result = runner.invoke(cli, ["run"])
            assert result.exit_code == 0, result.output
            assert "JOB STARTED: build" in result.output
            assert "build: SUCCESS (2 steps)" in result.output
            assert Path("out/artifact.txt").exists()

    def test_failure_exits_one_and_stops(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(FAILING)
            result = runner.invoke(cli, ["run"])
            assert result.exit_code == 1
            assert "STEP FAILED: Test (step 2)" in result.output
            assert "Exit code: 4" in result.output
            assert "FAILED at step 2 (Test)" in result.output
            assert not Path("never-ran").exists()

    def test_event_filter_selects_nothing(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING)
            result = runner.invoke(cli, ["run", "--event", "push", "--branch", "dev"])
            assert result.exit_code == 2

    def test_explicit_workflow_and_workspace(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING, "other_workflow.py")
            Path("ws").mkdir()
            result = runner.invoke(cli, ["run", "--workflow", "other_workflow", "--workspace", "ws"])
            assert result.exit_code == 0, result.output
            assert Path("ws/out/artifact.txt").exists()

    def test_missing_workspace_is_configuration_error(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING)
            result = runner.invoke(cli, ["run", "--workspace", "missing"])
            assert result.exit_code == 2

    def test_no_workflow_found(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["run"])
            assert result.exit_code == 2

    def test_multiple_workflows_found(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING, "a_workflow.py")
            _write_workflow(PASSING, "b_workflow.py")
            result = runner.invoke(cli, ["run"])
            assert result.exit_code == 2

    def test_step_timeout(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(
                """
                from seqci import job, sh
                JOBS = [job("slow", sh("Sleep", "sleep 5"))]
                """
            )
            result = runner.invoke(cli, ["run", "--timeout", "0.2"])
            assert result.exit_code == 1
            assert "Exit code: 124" in result.output

    def test_configuration_error_in_later_job_keeps_earlier_results(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(
                """
                from seqci import wf, job, sh, toolchain

                def workflow():
                    return wf(
                        job("first", sh("Ok", "true")),
                        job("second", toolchain("Install Zig", "zig")),
                    )
                """
            )
            result = runner.invoke(cli, ["run"])
            assert result.exit_code == 2
            assert "first: SUCCESS (1 steps)" in result.output
            assert "Invalid job configuration" in result.output


class TestPlan:
    def test_plan_lists_steps(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING)
            result = runner.invoke(cli, ["plan"])
            assert result.exit_code == 0
            assert "build (runs-on: ubuntu-latest)" in result.output
            assert "1. [run] Prepare" in result.output

    def test_plan_json(self, runner):
        with runner.isolated_filesystem():
            _write_workflow(PASSING)
            result = runner.invoke(cli, ["plan", "--json", "--event", "push", "--branch", "main"])
            assert result.exit_code == 0
            data = json.loads(result.output)
            assert data[0]["name"] == "build"
            assert [s["name"] for s in data[0]["steps"]] == ["Prepare", "Check"]

    def test_broken_workflow(self, runner):
        with runner.isolated_filesystem():
            _write_workflow("from seqci import job\nJOBS = [job('empty')]\n")
            result = runner.invoke(cli, ["plan"])
            assert result.exit_code == 2
