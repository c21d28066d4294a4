"""Tests for the workflow DSL helpers."""

from pathlib import Path

import pytest

from seqci.dsl import JobBuilder, build, job, on_push, sh, toolchain, uses, wf
from seqci.errors import ConfigurationError
from seqci.loader import load_workflow
from seqci.model import Checkout, Provision, RunCommand

ROOT = Path(__file__).resolve().parent.parent


class TestStepHelpers:
    def test_sh_stringifies_env(self):
        step = sh("build", "make", env={"JOBS": 4})
        assert isinstance(step, RunCommand)
        assert step.env == {"JOBS": "4"}

    def test_toolchain_components_become_tuple(self):
        step = toolchain("Install Rust", components=["clippy", "rustfmt"])
        assert step.components == ("clippy", "rustfmt")
        assert step.params() == {
            "name": "rust",
            "version": "stable",
            "components": ["clippy", "rustfmt"],
            "override": False,
        }


class TestUses:
    def test_checkout_action(self):
        step = uses("actions/checkout@v4", "Checkout source")
        assert isinstance(step, Checkout)
        assert step.name == "Checkout source"
        assert step.repository is None

    def test_actions_rs_toolchain(self):
        step = uses(
            "actions-rs/toolchain@v1",
            "Install Rust",
            with_={"toolchain": "stable", "components": "clippy", "override": True},
        )
        assert isinstance(step, Provision)
        assert step.version == "stable"
        assert step.components == ("clippy",)
        assert step.override is True

    def test_string_flags_and_component_lists(self):
        step = uses(
            "actions-rs/toolchain@v1",
            with_={"toolchain": "nightly", "components": "clippy, rustfmt", "override": "false"},
        )
        assert step.name == "actions-rs/toolchain"
        assert step.components == ("clippy", "rustfmt")
        assert step.override is False

    def test_dtolnay_version_from_ref(self):
        step = uses("dtolnay/rust-toolchain@1.75.0", "Rust")
        assert step.version == "1.75.0"

    def test_unknown_action(self):
        with pytest.raises(ConfigurationError) as exc_info:
            uses("actions/setup-python@v5", "Python")
        assert "setup-python" in exc_info.value.message


class TestJobHelpers:
    def test_job_requires_steps(self):
        with pytest.raises(ConfigurationError):
            job("empty")

    def test_job_combines_steps_list_and_positional(self):
        j = job("x", sh("b", "b"), steps_list=[sh("a", "a")])
        assert [s.name for s in j.steps] == ["a", "b"]

    def test_builder(self):
        j = (
            JobBuilder("lint")
            .runs_on("ubuntu-latest")
            .on(on_push("main"))
            .with_env(CI=1)
            .define_step("fmt", "cargo fmt -- --check")
            .build()
        )
        assert j.runs_on == "ubuntu-latest"
        assert j.env == {"CI": "1"}
        assert j.steps[0].run == "cargo fmt -- --check"

    def test_builder_without_steps(self):
        with pytest.raises(ConfigurationError):
            build("nothing").build()

    def test_wf_returns_list(self):
        assert wf(job("a", sh("a", "a"))) == [job("a", sh("a", "a"))]


class TestBundledWorkflow:
    def test_rust_pipeline_shape(self):
        jobs = load_workflow(ROOT / "seqci_workflow.py")
        assert len(jobs) == 1
        j = jobs[0]
        assert j.name == "build-and-test"
        assert j.runs_on == "ubuntu-latest"
        assert [s.kind for s in j.steps] == ["checkout", "provision", "run", "run", "run"]
        assert [s.name for s in j.steps][2:] == ["Run cargo fmt", "Run cargo clippy", "Run cargo test"]
        assert j.steps[1].components == ("clippy",)
        assert j.triggered_by("pull_request", "main")
        assert not j.triggered_by("push", "feature/x")
