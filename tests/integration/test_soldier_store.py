"""
Integration tests for the soldier store (PostgreSQL via testcontainers).
"""

from datetime import date, datetime, timedelta

import psycopg
import pytest

from army_records.core.models import SoldierRecord
from army_records.core.schema import candidate_to_record

T0 = datetime(2024, 3, 1, 8, 0, 0)


def store_all(writer, candidates, start=T0):
    """Upsert candidates one minute apart, first one oldest."""
    return [
        writer.upsert_soldier(candidate_to_record(c), now=start + timedelta(minutes=i))
        for i, c in enumerate(candidates)
    ]


@pytest.mark.integration
class TestUpsert:
    """Tests for insert-or-update by soldier id"""

    def test_insert(self, soldier_writer, valid_soldiers):
        stored = soldier_writer.upsert_soldier(candidate_to_record(valid_soldiers[0]), now=T0)

        assert stored.id == "S-1001"
        assert stored.service_date == date(2015, 6, 1)
        assert stored.created_at == T0
        assert stored.updated_at == T0
        assert soldier_writer.find_by_id("S-1001") == stored

    def test_update_in_place(self, soldier_writer, valid_soldiers):
        soldier_writer.upsert_soldier(candidate_to_record(valid_soldiers[1]), now=T0)
        promoted = SoldierRecord.model_validate({**valid_soldiers[1], "rank": "Major"})

        later = T0 + timedelta(days=30)
        stored = soldier_writer.upsert_soldier(promoted, now=later)

        assert soldier_writer.count() == 1
        assert stored.rank == "Major"
        assert stored.created_at == T0
        assert stored.updated_at == later

    def test_unknown_id(self, soldier_writer):
        assert soldier_writer.find_by_id("S-9999") is None

    def test_store_refuses_out_of_range_status(self, soldier_writer, valid_soldiers):
        record = SoldierRecord.model_construct(
            **{**valid_soldiers[0], "service_date": date(2015, 6, 1), "status": "Missing"}
        )

        with pytest.raises(psycopg.errors.CheckViolation):
            soldier_writer.upsert_soldier(record)

        assert soldier_writer.count() == 0


@pytest.mark.integration
class TestQueries:
    """Tests for counting and listing stored soldiers"""

    def test_count_by_status(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        assert soldier_writer.count() == 3
        assert soldier_writer.count(status="Active") == 2
        assert soldier_writer.count(status="Deceased") == 0

    def test_newest_first(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        page = soldier_writer.list_soldiers()

        assert [s.id for s in page.soldiers] == ["S-1003", "S-1002", "S-1001"]
        assert page.total == 3
        assert page.total_pages == 1
        assert page.current_page == 1

    def test_status_filter_is_exact(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        assert [s.id for s in soldier_writer.list_soldiers(status="Retired").soldiers] == ["S-1002"]
        assert soldier_writer.list_soldiers(status="retired").total == 0

    def test_unit_filter_is_case_insensitive_substring(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        page = soldier_writer.list_soldiers(unit="INFANTRY")

        assert [s.id for s in page.soldiers] == ["S-1003", "S-1001"]

    def test_unit_filter_matches_wildcards_literally(self, soldier_writer, make_soldiers):
        store_all(soldier_writer, make_soldiers(first={"unit": "100% Recon"}, second={"unit": "A_B Company"}))

        assert [s.id for s in soldier_writer.list_soldiers(unit="%").soldiers] == ["S-1001"]
        assert [s.id for s in soldier_writer.list_soldiers(unit="_").soldiers] == ["S-1002"]

    def test_combined_filters(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        page = soldier_writer.list_soldiers(status="Active", unit="armored")

        assert page.total == 0
        assert page.soldiers == []
        assert page.total_pages == 0

    def test_pagination(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        first = soldier_writer.list_soldiers(page=1, page_size=2)
        second = soldier_writer.list_soldiers(page=2, page_size=2)
        beyond = soldier_writer.list_soldiers(page=3, page_size=2)

        assert [s.id for s in first.soldiers] == ["S-1003", "S-1002"]
        assert [s.id for s in second.soldiers] == ["S-1001"]
        assert beyond.soldiers == []
        assert first.total_pages == second.total_pages == 2
        assert second.current_page == 2

    def test_iter_all(self, soldier_writer, valid_soldiers):
        store_all(soldier_writer, valid_soldiers)

        assert [s.id for s in soldier_writer.iter_all()] == ["S-1003", "S-1002", "S-1001"]
