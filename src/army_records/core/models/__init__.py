"""
Core data models for the soldier records pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .pipeline_result import PipelineResult
from .processing_log import ProcessingLogEntry
from .soldier_record import SoldierPage, SoldierRecord, StoredSoldier
from .store_health import StoreHealth
from .validation_verdict import ValidationVerdict
from .violation import Violation, render_violations

__all__ = [
    "SoldierRecord",
    "StoredSoldier",
    "SoldierPage",
    "Violation",
    "ValidationVerdict",
    "ProcessingLogEntry",
    "PipelineResult",
    "StoreHealth",
    "render_violations",
]
