"""
Batch submission readers.
"""

from .file_reader import FileReader, InputKind, detect_kind
from .spreadsheet_reader import SpreadsheetReader
from .xml_reader import XMLReader

__all__ = [
    "FileReader",
    "InputKind",
    "SpreadsheetReader",
    "XMLReader",
    "detect_kind",
]
