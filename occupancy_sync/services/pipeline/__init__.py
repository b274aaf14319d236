"""Pipeline infrastructure for the reconciliation cycle."""

from .base_step import PipelineStep
from .context import ReconciliationContext
from .pipeline import Pipeline

__all__ = [
    "PipelineStep",
    "ReconciliationContext",
    "Pipeline",
]
