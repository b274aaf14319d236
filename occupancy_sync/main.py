"""Main entry point: run one reconciliation and sync cycle."""

import asyncio
import json
import sys

from occupancy_sync.config import configure_logging, get_logger, settings
from occupancy_sync.services.orchestration_service import (
    OccupancyOrchestrator,
    OrchestrationError,
    ServiceUnavailableError,
)

logger = get_logger(__name__)


async def main() -> int:
    """Run one sync cycle and print the JSON report.

    Returns:
        Process exit code
    """
    logger.info(
        "Starting unit occupancy sync",
        environment=settings.environment,
        dry_run=settings.dry_run,
    )

    missing = settings.validate_credentials()
    if missing:
        logger.error("Configuration incomplete", missing=missing)
        print(json.dumps({"success": False, "error": f"Missing: {', '.join(missing)}"}))
        return 1

    orchestrator = None
    try:
        orchestrator = OccupancyOrchestrator()
        report = await orchestrator.trigger_sync()
        print(report.model_dump_json(indent=2))
        return 0 if report.success else 1
    except ServiceUnavailableError as e:
        logger.error("Upstream credentials rejected", error=str(e))
        print(json.dumps({"success": False, "error": str(e)}))
        return 2
    except OrchestrationError as e:
        logger.error("Reconciliation cycle failed", error=str(e))
        print(json.dumps({"success": False, "error": str(e)}))
        return 1
    except Exception as e:
        logger.error(
            "Fatal error in main application",
            error=str(e),
            exc_info=True,
        )
        return 1
    finally:
        if orchestrator is not None:
            await orchestrator.close()


def run_sync() -> int:
    """Configure logging and run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    configure_logging()
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(run_sync())
