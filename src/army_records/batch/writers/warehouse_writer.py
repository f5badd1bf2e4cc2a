"""
Batch warehouse writer for accepted soldier batches.

Writes every candidate of an accepted batch through SoldierWriter, one
upsert per record, so a store refusal or a candidate the record model
refuses does not abort its siblings.
"""

from typing import Any, Protocol

import psycopg
import pydantic

from army_records.core.models import SoldierRecord, StoredSoldier
from army_records.core.schema.mapping import candidate_to_record
from army_records.observability.logger import get_logger

logger = get_logger(__name__)


class SoldierStore(Protocol):
    """The store operation the batch writer depends on."""

    def upsert_soldier(self, record: SoldierRecord) -> StoredSoldier:
        ...


class BatchWriteResult:
    """Outcome of writing one accepted batch."""

    def __init__(self):
        self.stored: list[StoredSoldier] = []
        self.failed_ids: list[str] = []

    @property
    def stored_count(self) -> int:
        return len(self.stored)

    @property
    def failed_count(self) -> int:
        return len(self.failed_ids)


class BatchWarehouseWriter:
    """
    Writes accepted candidates to the soldier store.
    """

    def __init__(self, store: SoldierStore):
        """
        Initialize batch warehouse writer.

        Args:
            store: SoldierWriter or any object with upsert_soldier()
        """
        self.store = store

    def write_candidates(self, candidates: list[dict[str, Any]]) -> BatchWriteResult:
        """
        Upsert each candidate independently.

        Args:
            candidates: Candidates of a batch that passed validation

        Returns:
            BatchWriteResult with stored records and failed ids

        Raises:
            psycopg.OperationalError: If the store is unreachable
        """
        result = BatchWriteResult()

        for candidate in candidates:
            soldier_id = str(candidate.get("id", ""))
            try:
                record = candidate_to_record(candidate)
            except pydantic.ValidationError as e:
                # Reachable when a rule the model enforces is a warning or disabled
                logger.error(
                    f"Soldier {soldier_id} does not fit the stored record: {e.error_count()} error(s)",
                    extra={"soldier_id": soldier_id, "errors": [err["msg"] for err in e.errors()]}
                )
                result.failed_ids.append(soldier_id)
                continue

            try:
                result.stored.append(self.store.upsert_soldier(record))
            except psycopg.OperationalError:
                raise
            except psycopg.DatabaseError as e:
                logger.error(
                    f"Failed to store soldier {soldier_id}: {e}",
                    extra={"soldier_id": soldier_id}
                )
                result.failed_ids.append(soldier_id)

        return result
