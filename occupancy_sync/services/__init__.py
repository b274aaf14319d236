"""Business services package.

The orchestrator lives in ``occupancy_sync.services.orchestration_service``;
it is not re-exported here because the pipeline steps import sibling
service modules through this package.
"""
