"""
Exception hierarchy for the records pipeline.

Schema violations are not exceptions: they are collected as data in a
ValidationVerdict. The exceptions below cover malformed input and
operational failures around the pipeline.
"""


class ArmyRecordsError(Exception):
    """Base class for all application errors."""


class RecordParseError(ArmyRecordsError):
    """Raised when an XML document or spreadsheet cannot be parsed."""

    def __init__(self, source_kind: str, message: str):
        self.source_kind = source_kind
        self.message = message
        super().__init__(f"{source_kind} parse error: {message}")


class UploadRejectedError(ArmyRecordsError):
    """Raised when an upload is refused before it enters the pipeline."""


class ExportNotFoundError(ArmyRecordsError):
    """Raised when a requested annotated spreadsheet does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Export file not found: {name}")


class InputValidationError(ArmyRecordsError, ValueError):
    """Raised when a command or query argument fails validation."""
