"""Base class for reconciliation pipeline steps."""

from abc import ABC, abstractmethod

from structlog import get_logger

from occupancy_sync.clients import AuthConfigError
from occupancy_sync.services.pipeline.context import ReconciliationContext

logger = get_logger(__name__)


class PipelineStep(ABC):
    """Abstract base class for pipeline steps.

    Each step should:
    1. Implement execute() method
    2. Read data from context
    3. Perform its work
    4. Write results back to context
    5. Return success boolean
    """

    def __init__(self, name: str | None = None):
        """Initialize the pipeline step.

        Args:
            name: Optional custom name for the step. Defaults to class name.
        """
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(step=self.name)

    @abstractmethod
    async def execute(self, context: ReconciliationContext) -> bool:
        """Execute the pipeline step.

        Args:
            context: Per-cycle context containing shared data

        Returns:
            True if step succeeded, False if failed
        """
        pass

    async def run(self, context: ReconciliationContext) -> bool:
        """Run the step with error handling and logging.

        Credential failures mark the context fatal so the pipeline stops
        even when the step is optional.

        Args:
            context: Per-cycle context

        Returns:
            True if step succeeded, False if failed
        """
        self.logger.info("Step starting", cycle_id=context.cycle_id)

        try:
            success = await self.execute(context)

            if success:
                self.logger.info("Step completed successfully", cycle_id=context.cycle_id)
            else:
                self.logger.warning("Step completed with failure", cycle_id=context.cycle_id)

            return success

        except AuthConfigError as e:
            self.logger.error(
                "Step failed on credentials",
                cycle_id=context.cycle_id,
                error=str(e),
            )
            context.fatal_error = e
            context.add_error(self.name, str(e))
            return False

        except Exception as e:
            self.logger.error(
                "Step failed with exception",
                cycle_id=context.cycle_id,
                error=str(e),
                exc_info=True,
            )
            context.add_error(self.name, str(e))
            return False

    def is_required(self) -> bool:
        """Check if this step is required for pipeline success.

        Returns:
            True if step failure should stop pipeline, False if optional
        """
        return True

    def get_name(self) -> str:
        return self.name
