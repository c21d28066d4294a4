# context.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import ConfigurationError


@dataclass
class ExecutionContext:
    """
    Everything a step sees while it runs: the workspace, extra environment
    variables, and the toolchains installed so far.

    Step environments are layered as `os.environ`, then the env of the job
    being run (`job_env`), then `env`, then per-step env. PATH entries go in
    front of whatever PATH that gives.

    Collaborators mutate the context (e.g. a freshly installed toolchain is
    put on PATH); mutations are visible to every later step of the same run
    and nothing else. Build a new context per run with `fresh()`.
    """
    workspace: Path
    env: Dict[str, str] = field(default_factory=dict)
    toolchains: Dict[str, str] = field(default_factory=dict)
    path_entries: List[str] = field(default_factory=list)
    step_timeout: float | None = None
    job_env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def fresh(
        cls,
        workspace: str | Path,
        *,
        env: Optional[Dict[str, str]] = None,
        step_timeout: float | None = None,
    ) -> ExecutionContext:
        return cls(
            workspace=Path(workspace).expanduser().resolve(),
            env={k: str(v) for k, v in (env or {}).items()},
            step_timeout=step_timeout,
        )

    # ---- mutations ----

    def prepend_path(self, entry: str | Path) -> None:
        entry = str(entry)
        if entry in self.path_entries:
            self.path_entries.remove(entry)
        self.path_entries.insert(0, entry)

    def register_toolchain(self, name: str, version: str) -> None:
        self.toolchains[name] = version

    # ---- queries ----

    def environ(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        env = os.environ.copy()
        env.update(self.job_env)
        env.update(self.env)
        if extra:
            env.update({k: str(v) for k, v in extra.items()})
        if self.path_entries:
            parts = list(self.path_entries)
            current = env.get("PATH")
            if current:
                parts.append(current)
            env["PATH"] = os.pathsep.join(parts)
        return env

    def resolve_cwd(self, rel: str | None) -> Path:
        return (self.workspace / (rel or ".")).resolve()

    def ensure_workspace(self) -> None:
        if not self.workspace.is_dir():
            raise ConfigurationError(
                "workspace directory does not exist",
                workspace=str(self.workspace),
            )
        if not os.access(self.workspace, os.W_OK):
            raise ConfigurationError(
                "workspace directory is not writable",
                workspace=str(self.workspace),
            )
