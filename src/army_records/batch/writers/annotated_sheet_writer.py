"""
Annotated spreadsheet writer for rejected batches.

Produces the correction sheet a clerk edits and re-submits: one row per
candidate with a remarks column, followed by a summary of every
violation in the batch.
"""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from army_records.core.models import ValidationVerdict
from army_records.core.schema.fields import (
    REMARKS_HEADER,
    SHEET_HEADERS,
    SOLDIER_FIELDS,
    SUMMARY_MARKER,
)
from army_records.core.schema.mapping import candidate_to_row

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="FFE0E0E0", end_color="FFE0E0E0", fill_type="solid")
REMARKS_FONT = Font(color="FFFF0000", bold=True)
REMARKS_WIDTH = 50
REMARKS_SEPARATOR = "; "
SHEET_TITLE = "Schema Violations"


def annotated_sheet_name(stored_filename: str) -> str:
    """Name of the correction sheet generated for a stored upload."""
    return f"{Path(stored_filename).stem}_schema_errors.xlsx"


class AnnotatedSheetWriter:
    """
    Writes a rejected verdict as an annotated .xlsx workbook.

    Layout:
    - Row 1: ID, Name, Rank, Unit, Service Date, Status, Schema Violations
      (bold on grey fill)
    - One row per candidate, in input order; column 7 holds that
      candidate's rendered violations joined by "; " (batch-level
      violations go on the first row, passing rows stay blank)
    - A blank row, the ALL SCHEMA VIOLATIONS: marker, then every rendered
      violation in column 7
    Non-empty remarks cells are red and bold.
    """

    def build(self, verdict: ValidationVerdict) -> Workbook:
        """
        Build the annotated workbook in memory.

        Args:
            verdict: Verdict of a rejected batch

        Returns:
            openpyxl Workbook
        """
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        ws.append(list(SHEET_HEADERS) + [REMARKS_HEADER])
        for cell in ws[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL

        for position, spec in enumerate(SOLDIER_FIELDS, start=1):
            ws.column_dimensions[get_column_letter(position)].width = spec.width
        ws.column_dimensions[get_column_letter(len(SOLDIER_FIELDS) + 1)].width = REMARKS_WIDTH

        for ordinal, candidate in enumerate(verdict.soldiers, start=1):
            remarks = REMARKS_SEPARATOR.join(
                v.render() for v in verdict.violations_for(ordinal)
            )
            ws.append(candidate_to_row(candidate) + [remarks or None])

        rendered = verdict.rendered
        if rendered:
            ws.append([])
            blanks = [None] * len(SOLDIER_FIELDS)
            ws.append(blanks + [SUMMARY_MARKER])
            for message in rendered:
                ws.append(blanks + [message])

        remarks_column = len(SOLDIER_FIELDS) + 1
        for row in ws.iter_rows(min_row=2, min_col=remarks_column, max_col=remarks_column):
            cell = row[0]
            if cell.value:
                cell.font = REMARKS_FONT

        return wb

    def write(self, verdict: ValidationVerdict, output_path: str | Path) -> Path:
        """
        Write the annotated workbook to disk.

        Args:
            verdict: Verdict of a rejected batch
            output_path: Destination .xlsx path

        Returns:
            Path of the written file
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.build(verdict).save(path)
        return path
