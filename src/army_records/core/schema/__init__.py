"""
Record shapes: canonical field definitions and the mappings between
tree, tabular and stored forms.
"""

from .fields import (
    FIELD_KEYS,
    RECORD_TAG,
    ROOT_TAG,
    SHEET_HEADERS,
    SOLDIER_FIELDS,
    STATUS_VALUES,
    FieldSpec,
)
from .mapping import (
    candidate_to_record,
    candidate_to_row,
    candidates_to_tree,
    coerce_candidates,
    record_to_stored,
    rows_to_candidates,
    stored_from_row,
    stored_to_row,
    tree_to_candidates,
)

__all__ = [
    "FieldSpec",
    "SOLDIER_FIELDS",
    "FIELD_KEYS",
    "SHEET_HEADERS",
    "STATUS_VALUES",
    "ROOT_TAG",
    "RECORD_TAG",
    "coerce_candidates",
    "tree_to_candidates",
    "candidates_to_tree",
    "rows_to_candidates",
    "candidate_to_row",
    "candidate_to_record",
    "record_to_stored",
    "stored_from_row",
    "stored_to_row",
]
