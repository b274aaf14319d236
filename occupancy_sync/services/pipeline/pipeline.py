"""Pipeline executor for the reconciliation cycle."""

from structlog import get_logger

from .base_step import PipelineStep
from .context import ReconciliationContext

logger = get_logger(__name__)


class Pipeline:
    """Pipeline for executing a sequence of reconciliation steps.

    The pipeline:
    1. Executes steps in order
    2. Passes context between steps
    3. Stops on a failed required step or a credential failure
    4. Continues past failed optional steps
    """

    def __init__(self, name: str, steps: list[PipelineStep]):
        """Initialize the pipeline.

        Args:
            name: Pipeline name for logging
            steps: List of pipeline steps to execute in order
        """
        self.name = name
        self.steps = steps
        self.logger = logger.bind(pipeline=name)

    async def execute(self, context: ReconciliationContext) -> ReconciliationContext:
        """Execute the pipeline.

        Args:
            context: Per-cycle context

        Returns:
            Updated context with results
        """
        self.logger.info(
            "Pipeline starting",
            cycle_id=context.cycle_id,
            step_count=len(self.steps),
        )

        successful_steps = 0
        failed_steps = 0
        stopped = False

        for step in self.steps:
            step_name = step.get_name()

            success = await step.run(context)

            if success:
                successful_steps += 1
                continue

            failed_steps += 1

            if context.fatal_error is not None:
                self.logger.error(
                    "Credential failure, stopping pipeline",
                    cycle_id=context.cycle_id,
                    step=step_name,
                )
                stopped = True
                break

            if step.is_required():
                self.logger.error(
                    "Required step failed, stopping pipeline",
                    cycle_id=context.cycle_id,
                    step=step_name,
                )
                stopped = True
                break

            self.logger.warning(
                "Optional step failed, continuing pipeline",
                cycle_id=context.cycle_id,
                step=step_name,
            )

        # Optional step failures degrade the snapshot but not the cycle
        context.success = not stopped

        context.stats["pipeline"] = {
            "name": self.name,
            "total_steps": len(self.steps),
            "successful_steps": successful_steps,
            "failed_steps": failed_steps,
        }

        self.logger.info(
            "Pipeline completed",
            cycle_id=context.cycle_id,
            success=context.success,
            successful_steps=successful_steps,
            failed_steps=failed_steps,
        )

        return context

    def get_step_names(self) -> list[str]:
        return [step.get_name() for step in self.steps]
