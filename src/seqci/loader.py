# loader.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import List, Optional

from .model import Job
from .ui.console import get_console


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

def load_workflow(path: str | Path) -> List[Job]:
    """
    Load a workflow from a python file path.

    The file must define either:
      - workflow() -> List[Job]
      - JOBS = [Job, ...]

    Returns:
      List[Job]
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ValueError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"seqci_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    jobs = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        try:
            jobs = globals_dict["workflow"]()
        except TypeError as e:
            if "positional arguments but" in str(e) and "was given" in str(e):
                raise TypeError(
                    "Your workflow() is being called with arguments (name collision with the helper). "
                    "Use the 'wf' helper instead: `from seqci import wf, job, sh` then "
                    "`def workflow(): return wf(job(...), job(...))`"
                ) from e
            raise
    elif "JOBS" in globals_dict:
        jobs = globals_dict["JOBS"]

    if not isinstance(jobs, list) or not all(isinstance(j, Job) for j in jobs):
        raise TypeError(
            "Workflow must return/define a List[Job]. "
            "Define workflow() -> List[Job] or JOBS = [Job, ...]."
        )

    names = [j.name for j in jobs]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ValueError(f"Duplicate job names found: {dupes}")

    return jobs


# ----------------------------------------------------------------------
# Trigger filtering (happens before a job is handed to the executor)
# ----------------------------------------------------------------------

def select_jobs(
    jobs: List[Job],
    *,
    event: Optional[str] = None,
    branch: Optional[str] = None,
    only: Optional[str] = None,
    print_plan: bool = False,
) -> List[Job]:
    console = get_console()
    selected: List[Job] = []

    for j in jobs:
        if only is not None and j.name != only:
            continue

        if event is None:
            selected.append(j)
            if print_plan:
                console.print_plan_job(j.name, "no event filter")
            continue

        if j.triggered_by(event, branch):
            selected.append(j)
            if print_plan:
                reason = "no triggers declared" if not j.triggers else f"{event} on {branch or '*'}"
                console.print_plan_job(j.name, reason)
        elif print_plan:
            console.print_plan_job_skipped(j.name, f"not triggered by {event} on {branch or '*'}")

    return selected
