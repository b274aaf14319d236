"""Step to fetch today's calendar entry for every unit."""

from occupancy_sync.clients import AuthConfigError
from occupancy_sync.services.calendar_service import CalendarService
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext


class FetchCalendarStep(PipelineStep):
    """Fetch calendar days on a bounded pool; failed units are degraded."""

    def __init__(self, calendar_service: CalendarService):
        super().__init__("FetchCalendar")
        self.calendar_service = calendar_service

    async def execute(self, context: ReconciliationContext) -> bool:
        unit_ids = [unit.id for unit in context.units]

        try:
            result = await self.calendar_service.fetch_days(unit_ids, context.today)
        except AuthConfigError:
            raise
        except Exception as e:
            # Without a result no unit's calendar can be trusted
            context.calendar_days = {}
            context.degraded_unit_ids = set(unit_ids)
            context.add_error(self.name, f"Failed to fetch calendar: {str(e)}")
            return False

        context.calendar_days = result.days
        context.degraded_unit_ids = set(result.failed_unit_ids)
        context.stats["calendar"] = {
            "units": len(unit_ids),
            "failed": len(result.failed_unit_ids),
        }
        return True

    def is_required(self) -> bool:
        """Calendar signals are optional; missing ones degrade units.

        Returns:
            False
        """
        return False
