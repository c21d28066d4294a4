# executor.py
from __future__ import annotations

from typing import Callable, Dict, Optional

from .collaborators import Collaborators
from .context import ExecutionContext
from .errors import CIError, CommandFailure, ConfigurationError, ProvisioningFailure
from .model import Checkout, Job, PipelineState, Provision, RunCommand, RunResult, Step
from .ui.console import Console, get_console

StepHandler = Callable[[Step, ExecutionContext], RunResult]


class PipelineExecutor:
    """
    Run the steps of one job in declared order, fail-fast.

    Each step is handed to the collaborator its kind names; the first
    failing step ends the job and its result, tagged with the step name
    and index, becomes the job's result. Nothing is retried.
    """

    def __init__(self, collaborators: Collaborators, console: Optional[Console] = None):
        self.collaborators = collaborators
        self.console = console
        self.state = PipelineState()

    # ---- dispatch ----

    def _handlers(self) -> Dict[str, StepHandler]:
        return {
            Checkout.kind: self._checkout,
            Provision.kind: self._provision,
            RunCommand.kind: self._run,
        }

    def _checkout(self, step: Step, context: ExecutionContext) -> RunResult:
        return self.collaborators.checkout.checkout(step, context)

    def _provision(self, step: Step, context: ExecutionContext) -> RunResult:
        return self.collaborators.provision.provision(step, context)

    def _run(self, step: Step, context: ExecutionContext) -> RunResult:
        if not isinstance(step, RunCommand):
            raise TypeError(f"run handler got a {type(step).__name__} step")
        timeout = step.timeout if step.timeout is not None else context.step_timeout
        return self.collaborators.shell.run(
            step.run,
            context,
            cwd=step.cwd,
            env=step.env,
            timeout=timeout,
        )

    def _collaborator_for(self, step: Step) -> object:
        return {
            Checkout.kind: self.collaborators.checkout,
            Provision.kind: self.collaborators.provision,
            RunCommand.kind: self.collaborators.shell,
        }[step.kind]

    # ---- validation ----

    def validate(self, job: Job, context: ExecutionContext) -> Dict[int, StepHandler]:
        """Resolve every step up front; a bad job fails before any step runs."""
        if not job.steps:
            raise ConfigurationError(f"job {job.name!r} has no steps", job=job.name)

        handlers = self._handlers()
        resolved: Dict[int, StepHandler] = {}
        for i, step in enumerate(job.steps):
            handler = handlers.get(getattr(step, "kind", None))
            if handler is None:
                raise ConfigurationError(
                    f"step references unknown action {getattr(step, 'kind', None)!r}",
                    job=job.name,
                    step=step.name,
                    known=sorted(handlers),
                )
            resolved[i] = handler

            # collaborators may reject parameters they can never honor
            collaborator = self._collaborator_for(step)
            check = getattr(collaborator, "validate", None)
            if callable(check):
                check(step)

        context.ensure_workspace()
        return resolved

    # ---- execution ----

    def execute(self, job: Job, context: ExecutionContext) -> RunResult:
        console = self.console or get_console()
        self.state = PipelineState()

        try:
            resolved = self.validate(job, context)
        except ConfigurationError as e:
            if not e.job:
                e.job = job.name
            raise

        outer_job_env = context.job_env
        context.job_env = dict(job.env)
        try:
            return self._run_steps(job, resolved, context, console)
        finally:
            context.job_env = outer_job_env

    def _run_steps(
        self,
        job: Job,
        resolved: Dict[int, StepHandler],
        context: ExecutionContext,
        console: Console,
    ) -> RunResult:
        total = len(job.steps)
        console.print_job_start(job.name, job.runs_on)
        self.state.start()

        result = RunResult.success()
        for i, step in enumerate(job.steps):
            console.print_step(step.name, i + 1, total)
            try:
                result = self._invoke(resolved[i], step, context).tagged(step, i)
            except ConfigurationError as e:
                self.state.fail()
                e.job = e.job or job.name
                e.step = e.step or step.name
                raise
            console.print_step_result(result)

            if not result.ok:
                self.state.fail()
                return result

            self.state.advance(total)

        return result

    def _invoke(self, handler: StepHandler, step: Step, context: ExecutionContext) -> RunResult:
        try:
            return handler(step, context)
        except ConfigurationError:
            raise
        except ProvisioningFailure as e:
            return RunResult.failure(e.exit_code, error_kind="provisioning", message=e.message)
        except CommandFailure as e:
            return RunResult.failure(
                e.exit_code,
                error_kind="command",
                message=e.message,
                stdout=e.stdout,
                stderr=e.stderr,
            )
        except CIError as e:
            return RunResult.failure(1, error_kind=e.kind, message=e.message)


def execute(
    job: Job,
    context: ExecutionContext,
    collaborators: Optional[Collaborators] = None,
    console: Optional[Console] = None,
) -> RunResult:
    """Run `job` in `context` and return its aggregate RunResult."""
    executor = PipelineExecutor(collaborators or Collaborators.default(), console=console)
    return executor.execute(job, context)
