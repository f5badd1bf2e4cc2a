"""
PipelineResult model: the verdict summary returned for one submitted file.
"""

from typing import Literal

from pydantic import BaseModel, Field

from .processing_log import ProcessingOutcome

PipelineStage = Literal["received", "parsing", "validating", "accepted", "rejected"]


class PipelineResult(BaseModel):
    """
    Summary of one pipeline run.

    Attributes:
        success: True when the batch was accepted
        outcome: Ledger outcome tag
        stage: Terminal pipeline stage
        message: Short human-readable summary
        filename: Name the file was stored under
        original_filename: Name the file was submitted with
        accepted_count: Records written to the store
        rejected_count: Candidates held back by a rejection
        violations: Rendered violation messages
        failed_ids: Identifiers whose store write failed
        annotated_sheet: Name of the annotated spreadsheet, when rejected
    """

    success: bool
    outcome: ProcessingOutcome
    stage: PipelineStage
    message: str
    filename: str
    original_filename: str
    accepted_count: int = 0
    rejected_count: int = 0
    violations: list[str] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)
    annotated_sheet: str | None = None
