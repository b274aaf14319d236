"""Step to assign bedroom categories."""

from collections import Counter

from occupancy_sync.engine import CategoryClassifier
from occupancy_sync.models.occupancy import Anomaly, AnomalyKind, Category
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext


class ClassifyUnitsStep(PipelineStep):
    """Classify every unit; unclassifiable units are reported as anomalies."""

    def __init__(self, classifier: CategoryClassifier):
        super().__init__("ClassifyUnits")
        self.classifier = classifier

    async def execute(self, context: ReconciliationContext) -> bool:
        """Set ``category`` on each unit in the context.

        Args:
            context: Per-cycle context

        Returns:
            True
        """
        counts: Counter = Counter()
        for unit in context.units:
            unit.category = self.classifier.classify(unit)
            counts[unit.category.value] += 1

            if unit.category == Category.UNKNOWN:
                anomaly = Anomaly(
                    kind=AnomalyKind.UNKNOWN_CATEGORY,
                    unit_id=unit.id,
                    message="No bedroom signal found for unit",
                    details={"display_name": unit.display_name},
                )
                context.add_anomaly(anomaly)
                self.logger.warning(
                    "Unit category unknown",
                    cycle_id=context.cycle_id,
                    unit_id=unit.id,
                    display_name=unit.display_name,
                )

        context.stats["categories"] = dict(counts)
        return True
