from .dsl import job, sh, checkout, toolchain, uses, on_push, on_pull_request, wf, workflow, JobBuilder, build
from .executor import PipelineExecutor, execute
from .model import Job, Step, Checkout, Provision, RunCommand, Trigger, RunResult
from .context import ExecutionContext

__all__ = [
    "job", "sh", "checkout", "toolchain", "uses", "on_push", "on_pull_request",
    "wf", "workflow", "JobBuilder", "build",
    "PipelineExecutor", "execute",
    "Job", "Step", "Checkout", "Provision", "RunCommand", "Trigger", "RunResult",
    "ExecutionContext",
]
