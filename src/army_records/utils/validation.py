"""
Input validation utilities for the command-line surface.

Provides reusable checks for query and download arguments (pages, page
sizes, limits, status filters and export file names) so bad input is
refused before it reaches the store or the file system.
"""

import re

from army_records.core.errors import InputValidationError
from army_records.core.schema.fields import STATUS_VALUES

MAX_PAGE_SIZE = 100
MAX_LOG_LIMIT = 1000


def validate_positive_int(value: int, field_name: str, max_value: int | None = None) -> int:
    """
    Validate a positive integer argument.

    Args:
        value: The value to validate
        field_name: Name of the field (for error messages)
        max_value: Optional inclusive ceiling

    Returns:
        The validated value

    Raises:
        InputValidationError: If validation fails

    Examples:
        >>> validate_positive_int(3, "page")
        3
        >>> validate_positive_int(0, "page")  # doctest: +SKIP
        InputValidationError: page must be a positive integer, got 0
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputValidationError(f"{field_name} must be an integer, got {type(value).__name__}")

    if value <= 0:
        raise InputValidationError(f"{field_name} must be a positive integer, got {value}")

    if max_value is not None and value > max_value:
        raise InputValidationError(f"{field_name} exceeds maximum of {max_value}")

    return value


def validate_page(page: int) -> int:
    """Validate a 1-based page number."""
    return validate_positive_int(page, "page")


def validate_page_size(page_size: int) -> int:
    """Validate a page size (1 to MAX_PAGE_SIZE)."""
    return validate_positive_int(page_size, "page_size", MAX_PAGE_SIZE)


def validate_limit(limit: int, field_name: str = "limit", max_limit: int = MAX_LOG_LIMIT) -> int:
    """Validate a result limit (1 to max_limit)."""
    return validate_positive_int(limit, field_name, max_limit)


def validate_status(status: str | None) -> str | None:
    """
    Validate an optional status filter.

    Status matching is exact and case-sensitive, as in the schema.

    Raises:
        InputValidationError: If status is not a known value
    """
    if status is None:
        return None
    if status not in STATUS_VALUES:
        raise InputValidationError(
            f"status must be one of: {', '.join(STATUS_VALUES)} (got: {status})"
        )
    return status


def validate_export_name(name: str, field_name: str = "name") -> str:
    """
    Validate the name of a generated spreadsheet.

    Names must be a bare .xlsx file name: no directory parts, no path
    traversal and no null bytes.

    Args:
        name: The file name to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated name (stripped of whitespace)

    Raises:
        InputValidationError: If validation fails

    Examples:
        >>> validate_export_name("roster_schema_errors.xlsx")
        'roster_schema_errors.xlsx'
        >>> validate_export_name("../../etc/passwd")  # doctest: +SKIP
        InputValidationError: name contains path traversal characters (..)
    """
    if not name or not isinstance(name, str):
        raise InputValidationError(f"{field_name} must be a non-empty string")

    name = name.strip()

    if not name:
        raise InputValidationError(f"{field_name} cannot be empty or whitespace-only")

    if ".." in name:
        raise InputValidationError(f"{field_name} contains path traversal characters (..)")

    if "\x00" in name:
        raise InputValidationError(f"{field_name} contains null bytes")

    if "/" in name or "\\" in name:
        raise InputValidationError(f"{field_name} must be a file name, not a path")

    if not re.match(r"^[\w\-. ]+\.xlsx$", name):
        raise InputValidationError(f"{field_name} must be an .xlsx file name")

    if len(name) > 255:
        raise InputValidationError(f"{field_name} exceeds maximum length of 255 characters")

    return name
