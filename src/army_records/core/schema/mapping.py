"""
Pure mappings between the three shapes of a soldier record.

- Tree form: parsed XML, {"army_records": {"soldier": [ {...}, ... ]}}
- Tabular form: spreadsheet rows, one positional cell per field
- Stored form: StoredSoldier, the six fields plus system timestamps

A candidate is a dict keyed by the canonical field keys; it may hold
invalid values. Every mapping goes through SOLDIER_FIELDS.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from army_records.core.models import SoldierRecord, StoredSoldier

from .fields import FIELD_KEYS, RECORD_TAG, ROOT_TAG, SOLDIER_FIELDS


# =======================
# TREE <-> CANONICAL
# =======================

def coerce_candidates(container: Any) -> list[dict[str, Any]]:
    """
    Extract record candidates from the root container of a tree batch.

    A single record element (no list) becomes a one-element list. A record
    element that is not a mapping becomes an empty candidate so that its
    fields are reported missing rather than dropped.

    Args:
        container: Value under the root key

    Returns:
        List of candidate dictionaries, in document order
    """
    if not isinstance(container, dict):
        return []

    records = container.get(RECORD_TAG)
    if records is None:
        return []
    if not isinstance(records, list):
        records = [records]

    return [dict(r) if isinstance(r, dict) else {} for r in records]


def tree_to_candidates(tree: dict[str, Any]) -> list[dict[str, Any]] | None:
    """
    Candidates of a tree batch, or None if the root container is absent.
    """
    if ROOT_TAG not in tree:
        return None
    return coerce_candidates(tree[ROOT_TAG])


def candidates_to_tree(candidates: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """
    Build a tree batch from candidates, keeping only the canonical fields.
    """
    return {
        ROOT_TAG: {
            RECORD_TAG: [
                {key: candidate.get(key, "") for key in FIELD_KEYS}
                for candidate in candidates
            ]
        }
    }


# =======================
# CANONICAL <-> TABULAR
# =======================

def normalize_cell(value: Any) -> str:
    """
    Render a spreadsheet cell as field text.

    Empty cells become "", date cells become YYYY-MM-DD and integral
    numbers lose their decimal part.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def row_to_candidate(row: Sequence[Any]) -> dict[str, str] | None:
    """
    Map one data row positionally onto the canonical fields.

    Returns:
        Candidate dictionary, or None for rows lacking both ID and Name
        (blank trailing rows and the summary block of an annotated sheet)
    """
    cells = list(row[: len(SOLDIER_FIELDS)])
    cells.extend([None] * (len(SOLDIER_FIELDS) - len(cells)))

    candidate = {spec.key: normalize_cell(cell) for spec, cell in zip(SOLDIER_FIELDS, cells)}
    if not candidate["id"] and not candidate["name"]:
        return None
    return candidate


def rows_to_candidates(rows: Iterable[Sequence[Any]]) -> list[dict[str, str]]:
    """Map data rows (header excluded) to candidates, dropping non-records."""
    candidates = []
    for row in rows:
        candidate = row_to_candidate(row)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def candidate_to_row(candidate: dict[str, Any]) -> list[str]:
    """Map a candidate to its six spreadsheet cells."""
    row = []
    for key in FIELD_KEYS:
        value = candidate.get(key)
        row.append("" if value is None else str(value))
    return row


# =======================
# CANONICAL <-> STORED
# =======================

def candidate_to_record(candidate: dict[str, Any]) -> SoldierRecord:
    """
    Build the canonical model from a validated candidate.

    Raises:
        pydantic.ValidationError: If the candidate does not satisfy the schema
    """
    return SoldierRecord.model_validate({key: candidate.get(key) for key in FIELD_KEYS})


def record_to_candidate(record: SoldierRecord) -> dict[str, str]:
    """Canonical model back to candidate text values."""
    data = record.model_dump(include=set(FIELD_KEYS))
    data["service_date"] = record.service_date.isoformat()
    return {key: data[key] for key in FIELD_KEYS}


def record_to_stored(record: SoldierRecord, now: datetime | None = None) -> StoredSoldier:
    """Stamp a canonical record with created/updated timestamps."""
    stamp = now or datetime.utcnow()
    return StoredSoldier(**record.model_dump(), created_at=stamp, updated_at=stamp)


def stored_from_row(row: dict[str, Any]) -> StoredSoldier:
    """Build a StoredSoldier from a database row keyed by column name."""
    data = {spec.key: row[spec.column] for spec in SOLDIER_FIELDS}
    return StoredSoldier(**data, created_at=row["created_at"], updated_at=row["updated_at"])


def stored_to_row(stored: StoredSoldier) -> list[str]:
    """Map a stored soldier to spreadsheet cells (six fields, then created date)."""
    return candidate_to_row(record_to_candidate(stored)) + [stored.created_at.date().isoformat()]
