"""
Spreadsheet reader producing tabular and tree forms of a soldier batch.
"""

from typing import Any
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from army_records.core.errors import RecordParseError
from army_records.core.schema.fields import SHEET_HEADERS
from army_records.core.schema.mapping import candidates_to_tree, normalize_cell, rows_to_candidates
from army_records.observability.logger import get_logger

logger = get_logger(__name__)

# openpyxl parses sheet XML lazily in read-only mode, so these can surface
# from load_workbook or from iter_rows. SyntaxError covers both the
# ElementTree and lxml parse errors.
PARSE_ERRORS = (InvalidFileException, BadZipFile, KeyError, ValueError, SyntaxError)


class SpreadsheetReader:
    """
    Reads the first worksheet of an .xlsx workbook.

    Row 1 is the fixed header (ID, Name, Rank, Unit, Service Date, Status);
    every later row maps positionally onto the six fields. Extra columns,
    such as the remarks column of an annotated sheet, are ignored.
    """

    def read_rows(self, file_path: str) -> tuple[list[str], list[tuple[Any, ...]]]:
        """
        Read the header and data rows of sheet 1.

        Args:
            file_path: Path to .xlsx file

        Returns:
            Tuple of (header cells, data rows)

        Raises:
            RecordParseError: If the file is not a readable workbook
        """
        try:
            wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
        except PARSE_ERRORS as e:
            raise RecordParseError("Spreadsheet", str(e) or type(e).__name__) from e

        try:
            ws = wb.worksheets[0]
            rows_iter = ws.iter_rows(values_only=True)
            header = next(rows_iter, None)
            data_rows = [tuple(row) for row in rows_iter]
        except PARSE_ERRORS as e:
            raise RecordParseError("Spreadsheet", str(e) or type(e).__name__) from e
        finally:
            wb.close()

        header_cells = [normalize_cell(cell) for cell in (header or ())]
        if tuple(header_cells[: len(SHEET_HEADERS)]) != SHEET_HEADERS:
            logger.warning(
                f"Unexpected spreadsheet header in {file_path}: {header_cells}",
                extra={"expected_header": list(SHEET_HEADERS)}
            )

        return header_cells, data_rows

    def read_candidates(self, file_path: str) -> list[dict[str, str]]:
        """Read the data rows of a spreadsheet as candidates."""
        _, data_rows = self.read_rows(file_path)
        return rows_to_candidates(data_rows)

    def read(self, file_path: str) -> dict[str, Any]:
        """
        Read a spreadsheet and build the tree form of its batch.

        Returns:
            Tree form suitable for the schema validator
        """
        return candidates_to_tree(self.read_candidates(file_path))
