"""
ProcessingLogEntry model: one immutable ledger row per pipeline run.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ProcessingOutcome = Literal["validated", "corrected", "rejected"]


class ProcessingLogEntry(BaseModel):
    """
    Ledger entry recording the outcome of processing one file.

    Attributes:
        log_id: Auto-increment primary key (set once stored)
        filename: Original name of the submitted file
        outcome: "validated" (XML stored), "corrected" (re-submitted spreadsheet stored)
                 or "rejected"
        accepted_count: Records written to the store
        rejected_count: Candidates held back by a rejection
        violations: Rendered violation messages
        processed_at: When the run finished
    """

    log_id: int | None = None
    filename: str = Field(..., min_length=1)
    outcome: ProcessingOutcome
    accepted_count: int = Field(0, ge=0)
    rejected_count: int = Field(0, ge=0)
    violations: list[str] = Field(default_factory=list)
    processed_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "log_id": 7,
                "filename": "roster_march.xml",
                "outcome": "rejected",
                "accepted_count": 0,
                "rejected_count": 3,
                "violations": [
                    "SCHEMA VIOLATION: Soldier 2 - Missing required field: Rank"
                ]
            }
        }
