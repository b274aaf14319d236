"""Step to fetch reservations across the lookback/lookahead window."""

from occupancy_sync.clients import AuthConfigError
from occupancy_sync.models.occupancy import Anomaly, AnomalyKind
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext
from occupancy_sync.services.reservation_fetcher import ReservationFetcher, ReservationWindow


class FetchReservationsStep(PipelineStep):
    """Fetch and merge reservations.

    When every query strategy fails the cycle continues with the
    reservation feed marked unavailable, which degrades every unit.
    """

    def __init__(self, fetcher: ReservationFetcher):
        super().__init__("FetchReservations")
        self.fetcher = fetcher

    async def execute(self, context: ReconciliationContext) -> bool:
        window = ReservationWindow.around(context.today)

        try:
            result = await self.fetcher.fetch_reservations_detailed(window)
        except AuthConfigError:
            raise
        except Exception as e:
            context.reservations_failed = True
            context.add_anomaly(
                Anomaly(
                    kind=AnomalyKind.PARTIAL_FETCH_FAILURE,
                    message="Reservation feed unavailable",
                    details={"error": str(e)},
                )
            )
            context.add_error(self.name, f"Failed to fetch reservations: {str(e)}")
            return False

        context.stays = result.stays
        if result.partial:
            context.add_anomaly(
                Anomaly(
                    kind=AnomalyKind.PARTIAL_FETCH_FAILURE,
                    message="Some reservation queries failed",
                    details={"failed_strategies": result.failed_strategies},
                )
            )

        context.stats["reservations"] = {
            "stays": len(result.stays),
            "strategy_counts": result.strategy_counts,
            "failed_strategies": result.failed_strategies,
        }
        return True

    def is_required(self) -> bool:
        """Reservations are optional; units degrade without them.

        Returns:
            False
        """
        return False
