"""
Spreadsheet export of every stored soldier.
"""

from collections.abc import Iterable
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from army_records.core.models import StoredSoldier
from army_records.core.schema.fields import SHEET_HEADERS, SOLDIER_FIELDS
from army_records.core.schema.mapping import stored_to_row

CREATED_AT_HEADER = "Created At"
CREATED_AT_WIDTH = 20
SHEET_TITLE = "Soldiers"


class SoldierExportWriter:
    """
    Writes stored soldiers to an .xlsx workbook.

    The six field columns come first, so the export can be edited and
    re-submitted as a correction sheet; a trailing Created At column
    carries the date each id was first stored.
    """

    def write(self, soldiers: Iterable[StoredSoldier], output_path: str | Path) -> int:
        """
        Args:
            soldiers: Stored soldiers to export
            output_path: Destination .xlsx path

        Returns:
            Number of soldier rows written
        """
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        ws.append(list(SHEET_HEADERS) + [CREATED_AT_HEADER])
        for cell in ws[1]:
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="FFE0E0E0", end_color="FFE0E0E0", fill_type="solid")

        for position, spec in enumerate(SOLDIER_FIELDS, start=1):
            ws.column_dimensions[get_column_letter(position)].width = spec.width
        ws.column_dimensions[get_column_letter(len(SOLDIER_FIELDS) + 1)].width = CREATED_AT_WIDTH

        count = 0
        for soldier in soldiers:
            ws.append(stored_to_row(soldier))
            count += 1

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        return count
