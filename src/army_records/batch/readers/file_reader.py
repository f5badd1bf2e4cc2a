"""
Generic file reader dispatching on the declared input kind.
"""

from pathlib import Path
from typing import Any, Literal

from .spreadsheet_reader import SpreadsheetReader
from .xml_reader import XMLReader

InputKind = Literal["xml", "spreadsheet"]

EXTENSION_KINDS: dict[str, InputKind] = {
    ".xml": "xml",
    ".xlsx": "spreadsheet",
}


def detect_kind(filename: str) -> InputKind:
    """
    Determine the input kind from a file name.

    Raises:
        ValueError: If the extension is not a supported input format
    """
    suffix = Path(filename).suffix.lower()
    kind = EXTENSION_KINDS.get(suffix)
    if kind is None:
        raise ValueError(
            f"Unsupported file type '{suffix or filename}'. Only XML and Excel (.xlsx) files are allowed"
        )
    return kind


class FileReader:
    """
    Generic file reader supporting XML and spreadsheet submissions.
    """

    def __init__(self):
        self.xml_reader = XMLReader()
        self.spreadsheet_reader = SpreadsheetReader()

    def read(self, file_path: str, kind: InputKind = "xml") -> dict[str, Any]:
        """
        Read a file into tree form.

        Args:
            file_path: Path to file
            kind: "xml" or "spreadsheet"

        Returns:
            Tree form of the batch

        Raises:
            RecordParseError: If the file cannot be parsed
            ValueError: If the kind is unsupported
        """
        if kind == "xml":
            return self.xml_reader.read(file_path)
        elif kind == "spreadsheet":
            return self.spreadsheet_reader.read(file_path)
        else:
            raise ValueError(f"Unsupported input kind: {kind}")
