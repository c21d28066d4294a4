# seqci_workflow.py
# Build-and-test pipeline for a Rust crate: checkout, toolchain, fmt, clippy, test.
from __future__ import annotations

from seqci.dsl import wf, job, sh, uses, on_push, on_pull_request


def workflow():
    return wf(
        job(
            "build-and-test",
            uses("actions/checkout@v4", "Checkout source"),
            uses(
                "actions-rs/toolchain@v1",
                "Install Rust",
                with_={"toolchain": "stable", "components": "clippy", "override": True},
            ),
            sh("Run cargo fmt", "cargo fmt -- --check"),
            sh("Run cargo clippy", "cargo clippy -- -D warnings"),
            sh("Run cargo test", "cargo test"),
            runs_on="ubuntu-latest",
            on=[on_push("main"), on_pull_request("main")],
        ),
    )
