"""
Violation model: one structured schema or parse failure.
"""

from typing import Literal

from pydantic import BaseModel, Field

ViolationRule = Literal[
    "root_element",
    "at_least_one_record",
    "required_field",
    "type_check",
    "max_length",
    "date_format",
    "calendar_date",
    "enum",
    "regex",
    "parse_error",
]


class Violation(BaseModel):
    """
    A single rule failure.

    Attributes:
        ordinal: 1-based position of the offending record, None for batch-level failures
        field: Canonical field key, None for batch-level failures
        rule: Rule type that failed
        detail: Human-readable description of the failure
    """

    ordinal: int | None = Field(None, ge=1)
    field: str | None = None
    rule: ViolationRule
    detail: str

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "ordinal": 2,
                "field": "status",
                "rule": "enum",
                "detail": "Status must be one of: Active, Retired, Deceased (got: active)"
            }
        }

    @property
    def is_batch_level(self) -> bool:
        return self.ordinal is None

    def render(self) -> str:
        """Render the violation the way it appears in spreadsheets and responses."""
        if self.rule == "parse_error":
            return f"PARSE ERROR: {self.detail}"
        if self.ordinal is None:
            return f"SCHEMA VIOLATION: {self.detail}"
        return f"SCHEMA VIOLATION: Soldier {self.ordinal} - {self.detail}"


def render_violations(violations: list[Violation]) -> list[str]:
    return [v.render() for v in violations]
