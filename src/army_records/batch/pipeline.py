"""
Conversion pipeline orchestration.

Coordinates the flow of one submitted file:
RECEIVED → PARSING → VALIDATING → ACCEPTED | REJECTED
"""

import logging
from pathlib import Path
from typing import Protocol

from army_records.core.errors import RecordParseError, UploadRejectedError
from army_records.core.models import (
    PipelineResult,
    ProcessingLogEntry,
    ValidationVerdict,
    Violation,
)
from army_records.core.models.processing_log import ProcessingOutcome
from army_records.core.rules import SchemaValidator
from army_records.core.schema.fields import RECORD_TAG, ROOT_TAG
from army_records.observability import metrics
from army_records.observability.logger import get_logger, log_operation, log_stage

from .holding_areas import CORRECTED, EXCEL_EXPORTS, INVALID_RECORDS, UPLOADS, HoldingAreas
from .readers import FileReader, InputKind, detect_kind
from .writers import AnnotatedSheetWriter, BatchWarehouseWriter, XMLWriter, annotated_sheet_name
from .writers.warehouse_writer import SoldierStore

logger = get_logger(__name__)


class Ledger(Protocol):
    """The ledger operation the pipeline depends on."""

    def record(self, entry: ProcessingLogEntry) -> ProcessingLogEntry:
        ...


class ConversionPipeline:
    """
    Orchestrates the processing of one submitted file.

    Flow:
    1. RECEIVED: store the upload in the uploads area under a unique name
    2. PARSING: read XML or spreadsheet into tree form
    3. VALIDATING: run the schema validator over the whole batch
    4. ACCEPTED: upsert every record, move the file to corrected
       REJECTED: write the annotated sheet, move the file to invalid_records
    5. Append one ledger entry for the attempt

    A batch is accepted or rejected as a whole; no record of a rejected
    batch reaches the store.
    """

    def __init__(
        self,
        areas: HoldingAreas,
        store: SoldierStore,
        ledger: Ledger,
        validator: SchemaValidator | None = None
    ):
        """
        Initialize conversion pipeline.

        Args:
            areas: Holding areas for uploads, outcomes and exports
            store: Soldier store (SoldierWriter or compatible)
            ledger: Processing ledger (ProcessingLedger or compatible)
            validator: Schema validator (fixed soldier schema by default)
        """
        self.areas = areas
        self.ledger = ledger
        self.validator = validator or SchemaValidator()

        self.file_reader = FileReader()
        self.warehouse_writer = BatchWarehouseWriter(store)
        self.sheet_writer = AnnotatedSheetWriter()

    # =======================
    # RECEIVED
    # =======================

    def submit(
        self,
        payload: bytes,
        original_filename: str,
        kind: InputKind | None = None
    ) -> PipelineResult:
        """
        Receive an uploaded payload and process it.

        Args:
            payload: Raw file content
            original_filename: Name the file was submitted with
            kind: "xml" or "spreadsheet" (detected from the extension by default)

        Returns:
            PipelineResult of the run

        Raises:
            UploadRejectedError: If the upload is refused before processing
        """
        stored = self.areas.receive(payload, original_filename)
        return self.process_file(stored.name, original_filename, kind or detect_kind(original_filename))

    def submit_file(
        self,
        source_path: str | Path,
        original_filename: str | None = None,
        kind: InputKind | None = None
    ) -> PipelineResult:
        """
        Receive a local file and process it.
        """
        original_filename = original_filename or Path(source_path).name
        stored = self.areas.receive_file(source_path, original_filename)
        return self.process_file(stored.name, original_filename, kind or detect_kind(original_filename))

    def resubmit_corrected(
        self,
        source_path: str | Path,
        original_filename: str | None = None
    ) -> PipelineResult:
        """
        Process a corrected spreadsheet through the same state machine.

        Raises:
            UploadRejectedError: If the file is not a spreadsheet
        """
        original_filename = original_filename or Path(source_path).name
        try:
            kind = detect_kind(original_filename)
        except ValueError as e:
            raise UploadRejectedError(str(e)) from e
        if kind != "spreadsheet":
            raise UploadRejectedError("Corrected files must be Excel (.xlsx) spreadsheets")
        return self.submit_file(source_path, original_filename, kind="spreadsheet")

    # =======================
    # PARSING / VALIDATING
    # =======================

    def process_file(
        self,
        stored_name: str,
        original_filename: str,
        kind: InputKind
    ) -> PipelineResult:
        """
        Run a file already held in the uploads area through the pipeline.

        Args:
            stored_name: Name of the file in the uploads area
            original_filename: Name the file was submitted with
            kind: "xml" or "spreadsheet"

        Returns:
            PipelineResult of the run
        """
        with log_operation("Processing file", logger=logger, stored_as=stored_name, kind=kind):
            with metrics.track_duration(metrics.processing_duration_seconds, kind=kind):
                verdict = self.parse_and_validate(self.areas.path(UPLOADS) / stored_name, kind)

                if verdict.is_valid:
                    result = self._accept(verdict, stored_name, original_filename, kind)
                else:
                    result = self._reject(verdict, stored_name, original_filename, kind)

        metrics.record_file_processed(
            kind=kind,
            outcome=result.outcome,
            candidate_count=len(verdict.soldiers),
            violation_rules=[v.rule for v in verdict.violations],
        )
        return result

    def parse_and_validate(self, path: Path, kind: InputKind) -> ValidationVerdict:
        """
        Parse a file and validate its batch.

        A parse failure yields a rejected verdict with a single
        parse_error violation and no candidates.
        """
        log_stage(logger, "parsing", f"Parsing {path.name}", kind=kind)
        try:
            tree = self.file_reader.read(str(path), kind)
        except RecordParseError as e:
            log_stage(
                logger, "parsing", f"Parse failed for {path.name}: {e.message}",
                logging.WARNING, kind=kind
            )
            return ValidationVerdict.failed(Violation(rule="parse_error", detail=e.message))

        log_stage(logger, "validating", f"Validating {path.name}")
        verdict = self.validator.validate(tree)
        for warning in verdict.warnings:
            log_stage(logger, "validating", warning.render(), logging.WARNING, rule=warning.rule)
        return verdict

    # =======================
    # ACCEPTED / REJECTED
    # =======================

    def _accept(
        self,
        verdict: ValidationVerdict,
        stored_name: str,
        original_filename: str,
        kind: InputKind
    ) -> PipelineResult:
        outcome: ProcessingOutcome = "validated" if kind == "xml" else "corrected"

        written = self.warehouse_writer.write_candidates(verdict.soldiers)
        metrics.record_store_writes(written.stored_count, written.failed_count)
        self.areas.move(stored_name, UPLOADS, CORRECTED)

        self.ledger.record(ProcessingLogEntry(
            filename=original_filename,
            outcome=outcome,
            accepted_count=written.stored_count,
            rejected_count=written.failed_count,
        ))

        if written.failed_ids:
            message = (
                f"Stored {written.stored_count} of {len(verdict.soldiers)} soldier records; "
                f"{written.failed_count} could not be written"
            )
        else:
            message = f"Successfully processed {written.stored_count} soldier records"

        log_stage(logger, "accepted", message, outcome=outcome, stored_as=stored_name)

        return PipelineResult(
            success=True,
            outcome=outcome,
            stage="accepted",
            message=message,
            filename=stored_name,
            original_filename=original_filename,
            accepted_count=written.stored_count,
            rejected_count=written.failed_count,
            failed_ids=written.failed_ids,
        )

    def _reject(
        self,
        verdict: ValidationVerdict,
        stored_name: str,
        original_filename: str,
        kind: InputKind
    ) -> PipelineResult:
        sheet_name = annotated_sheet_name(stored_name)
        self.sheet_writer.write(verdict, self.areas.path(EXCEL_EXPORTS) / sheet_name)
        self.areas.move(stored_name, UPLOADS, INVALID_RECORDS)

        rendered = verdict.rendered
        self.ledger.record(ProcessingLogEntry(
            filename=original_filename,
            outcome="rejected",
            accepted_count=0,
            rejected_count=len(verdict.soldiers),
            violations=rendered,
        ))

        message = (
            f"Validation failed with {len(rendered)} violation(s); "
            f"correct {sheet_name} and re-submit it"
        )
        log_stage(
            logger, "rejected", message, logging.WARNING,
            stored_as=stored_name, violation_count=len(rendered)
        )

        return PipelineResult(
            success=False,
            outcome="rejected",
            stage="rejected",
            message=message,
            filename=stored_name,
            original_filename=original_filename,
            accepted_count=0,
            rejected_count=len(verdict.soldiers),
            violations=rendered,
            annotated_sheet=sheet_name,
        )


def convert_spreadsheet_to_xml(sheet_path: str | Path, output_path: str | Path) -> int:
    """
    Convert a (corrected) spreadsheet into an XML submission.

    Args:
        sheet_path: Source .xlsx file
        output_path: Destination .xml file

    Returns:
        Number of soldier records written

    Raises:
        RecordParseError: If the spreadsheet cannot be read
    """
    tree = FileReader().read(str(sheet_path), "spreadsheet")
    XMLWriter().write(tree, output_path)
    return len(tree[ROOT_TAG][RECORD_TAG])
