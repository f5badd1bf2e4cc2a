"""
Canonical soldier field definitions.

Every record shape (XML tree, spreadsheet row, stored row) and the default
validation rules are derived from SOLDIER_FIELDS, so the field list exists
in exactly one place.
"""

from typing import Literal

from pydantic import BaseModel

ROOT_TAG = "army_records"
RECORD_TAG = "soldier"

STATUS_VALUES = ("Active", "Retired", "Deceased")
SERVICE_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"

REMARKS_HEADER = "Schema Violations"
SUMMARY_MARKER = "ALL SCHEMA VIOLATIONS:"


class FieldSpec(BaseModel):
    """
    One soldier attribute as it appears in every representation.

    Attributes:
        key: Canonical key, also the XML child tag
        header: Spreadsheet column header
        label: Human-readable name used in violation messages
        column: Database column name
        kind: "string", "date" or "enum"
        max_length: Length ceiling for string fields
        width: Spreadsheet column width
    """

    key: str
    header: str
    label: str
    column: str
    kind: Literal["string", "date", "enum"] = "string"
    max_length: int | None = None
    width: int = 15

    class Config:
        frozen = True


SOLDIER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(key="id", header="ID", label="ID", column="soldier_id", max_length=50),
    FieldSpec(key="name", header="Name", label="Name", column="name", max_length=100, width=25),
    FieldSpec(key="rank", header="Rank", label="Rank", column="rank", max_length=50, width=20),
    FieldSpec(key="unit", header="Unit", label="Unit", column="unit", max_length=100, width=25),
    FieldSpec(key="service_date", header="Service Date", label="Service Date", column="service_date", kind="date"),
    FieldSpec(key="status", header="Status", label="Status", column="status", kind="enum"),
)

FIELD_KEYS: tuple[str, ...] = tuple(f.key for f in SOLDIER_FIELDS)
SHEET_HEADERS: tuple[str, ...] = tuple(f.header for f in SOLDIER_FIELDS)
FIELDS_BY_KEY: dict[str, FieldSpec] = {f.key: f for f in SOLDIER_FIELDS}
