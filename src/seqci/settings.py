from __future__ import annotations
import os

WORKSPACE = os.environ.get("SEQCI_WORKSPACE", ".")
WORKFLOW = os.environ.get("SEQCI_WORKFLOW", "seqci_workflow.py")
STEP_TIMEOUT = float(os.environ["SEQCI_STEP_TIMEOUT"]) if os.environ.get("SEQCI_STEP_TIMEOUT") else None
OUTPUT_TAIL = int(os.environ.get("SEQCI_OUTPUT_TAIL", "4000"))
