# collaborators/checkout.py
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

from ..context import ExecutionContext
from ..errors import ProvisioningFailure
from ..model import Checkout, RunResult


def _git(args: List[str], cwd: Path) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            check=False,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except FileNotFoundError:
        raise ProvisioningFailure("git command not found. Please install Git.", exit_code=127)


def remote_url(workspace: Path, remote: str = "origin") -> str | None:
    """URL of `remote` for the repository in `workspace`, if there is one."""
    try:
        res = _git(["remote", "get-url", remote], workspace)
    except ProvisioningFailure:
        return None
    return res.stdout.strip() if res.returncode == 0 else None


def _same_remote(url: str | None, repository: str) -> bool:
    if url is None:
        return False
    if url.rstrip("/") == repository.rstrip("/"):
        return True
    # local clones may record the path in another spelling
    a, b = Path(url), Path(repository)
    return a.exists() and b.exists() and a.resolve() == b.resolve()


class GitCheckout:
    """
    Materialize repository content into the workspace.

    Without a repository URL the workspace is taken to be the checkout
    already (local runs); it only has to be a git work tree, moved to
    `ref` when one is given. With a URL the repository is cloned into the
    workspace, or, if the workspace already holds a clone of it, fetched and
    moved to `ref` or else to the remote default branch.
    """

    def checkout(self, step: Checkout, context: ExecutionContext) -> RunResult:
        workspace = context.workspace
        log: List[str] = []

        if step.repository:
            if (workspace / ".git").exists():
                current = remote_url(workspace)
                if not _same_remote(current, step.repository):
                    return RunResult.failure(
                        1,
                        error_kind="provisioning",
                        message=(
                            f"workspace holds a clone of {current or 'an unknown remote'}, "
                            f"not {step.repository}"
                        ),
                    )
                res = _git(["fetch", "origin"], workspace)
                log.append(res.stdout)
                if res.returncode != 0:
                    return self._failed("git fetch failed", res)
                if not step.ref:
                    # move to the remote's default branch tip
                    res = _git(["checkout", "--force", "--detach", "origin/HEAD"], workspace)
                    log.append(res.stdout)
                    if res.returncode != 0:
                        return self._failed("git checkout origin/HEAD failed", res)
            else:
                res = _git(["clone", step.repository, "."], workspace)
                log.append(res.stdout)
                if res.returncode != 0:
                    return self._failed(f"git clone {step.repository} failed", res)
        else:
            res = _git(["rev-parse", "--is-inside-work-tree"], workspace)
            if res.returncode != 0 or res.stdout.strip() != "true":
                return self._failed(f"workspace is not a git work tree: {workspace}", res)

        if step.ref:
            res = _git(["checkout", step.ref], workspace)
            log.append(res.stdout)
            if res.returncode != 0:
                return self._failed(f"git checkout {step.ref} failed", res)

        head = _git(["rev-parse", "HEAD"], workspace)
        if head.returncode == 0:
            log.append(f"HEAD is {head.stdout.strip()}\n")
        return RunResult.success(stdout="".join(log))

    @staticmethod
    def _failed(message: str, res: subprocess.CompletedProcess) -> RunResult:
        return RunResult.failure(
            res.returncode,
            error_kind="provisioning",
            message=message,
            stdout=res.stdout or "",
            stderr=res.stderr or "",
        )
