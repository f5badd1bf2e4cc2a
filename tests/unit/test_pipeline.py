"""
Unit tests for the conversion pipeline, using in-memory store and ledger fakes.
"""

import zipfile

import psycopg
import pytest
from openpyxl import load_workbook

from army_records.batch import ConversionPipeline, convert_spreadsheet_to_xml
from army_records.batch.holding_areas import CORRECTED, EXCEL_EXPORTS, INVALID_RECORDS, UPLOADS
from army_records.batch.readers import XMLReader
from army_records.core.errors import UploadRejectedError
from army_records.core.rules import SchemaValidator, default_soldier_rules
from army_records.core.schema.fields import FIELD_KEYS, FIELDS_BY_KEY


@pytest.mark.unit
class TestAcceptedBatches:
    """Tests for batches that pass every rule"""

    def test_valid_xml_is_stored(self, pipeline, areas, fake_store, fake_ledger, valid_xml):
        result = pipeline.submit(valid_xml, "roster.xml")

        assert result.success is True
        assert result.outcome == "validated"
        assert result.stage == "accepted"
        assert result.accepted_count == 3
        assert result.violations == []
        assert result.annotated_sheet is None
        assert result.message == "Successfully processed 3 soldier records"
        assert set(fake_store.records) == {"S-1001", "S-1002", "S-1003"}

    def test_file_moves_to_corrected(self, pipeline, areas, valid_xml):
        result = pipeline.submit(valid_xml, "roster.xml")

        assert areas.list(CORRECTED) == [result.filename]
        assert areas.list(UPLOADS) == []

    def test_ledger_entry(self, pipeline, fake_ledger, valid_xml):
        pipeline.submit(valid_xml, "roster.xml")

        [entry] = fake_ledger.entries
        assert entry.filename == "roster.xml"
        assert entry.outcome == "validated"
        assert (entry.accepted_count, entry.rejected_count) == (3, 0)
        assert entry.violations == []

    def test_single_soldier_batch(self, pipeline, fake_store, make_xml, valid_soldiers):
        result = pipeline.submit(make_xml(valid_soldiers[:1]), "one.xml")

        assert result.success
        assert list(fake_store.records) == ["S-1001"]

    def test_spreadsheet_submission(self, pipeline, tmp_path, make_sheet, sheet_rows, valid_soldiers):
        sheet = make_sheet(tmp_path / "roster.xlsx", sheet_rows(valid_soldiers))

        result = pipeline.submit_file(sheet)

        assert result.outcome == "corrected"
        assert result.original_filename == "roster.xlsx"
        assert result.accepted_count == 3

    def test_resubmitting_same_ids_updates_in_place(self, pipeline, fake_store, make_xml, make_soldiers, valid_xml):
        pipeline.submit(valid_xml, "roster.xml")
        first_created = fake_store.records["S-1002"].created_at

        pipeline.submit(make_xml(make_soldiers(second={"rank": "Major"})), "roster.xml")

        assert len(fake_store.records) == 3
        assert fake_store.records["S-1002"].rank == "Major"
        assert fake_store.records["S-1002"].created_at == first_created

    def test_partial_store_failure(self, areas, store_factory, fake_ledger, valid_xml):
        pipeline = ConversionPipeline(areas, store_factory(fail_ids=["S-1002"]), fake_ledger)

        result = pipeline.submit(valid_xml, "roster.xml")

        assert result.success is True
        assert result.accepted_count == 2
        assert result.rejected_count == 1
        assert result.failed_ids == ["S-1002"]
        assert result.message.startswith("Stored 2 of 3 soldier records")
        assert fake_ledger.entries[0].rejected_count == 1


@pytest.mark.unit
class TestRejectedBatches:
    """Tests for batches with at least one violation"""

    def test_invalid_batch_is_not_stored(self, pipeline, fake_store, make_xml, make_soldiers):
        payload = make_xml(make_soldiers(second={"rank": None}))

        result = pipeline.submit(payload, "roster.xml")

        assert result.success is False
        assert result.outcome == "rejected"
        assert result.stage == "rejected"
        assert result.violations == ["SCHEMA VIOLATION: Soldier 2 - Missing required field: Rank"]
        assert result.accepted_count == 0
        assert result.rejected_count == 3
        assert fake_store.records == {}

    def test_annotated_sheet_and_file_placement(self, pipeline, areas, make_xml, make_soldiers):
        result = pipeline.submit(make_xml(make_soldiers(third={"status": "active"})), "roster.xml")

        assert result.annotated_sheet == result.filename.replace(".xml", "_schema_errors.xlsx")
        assert areas.list(EXCEL_EXPORTS) == [result.annotated_sheet]
        assert areas.list(INVALID_RECORDS) == [result.filename]
        assert areas.list(UPLOADS) == []
        assert result.annotated_sheet in result.message

    def test_ledger_entry(self, pipeline, fake_ledger, make_xml, make_soldiers):
        pipeline.submit(make_xml(make_soldiers(first={"service_date": "2021-02-30"})), "roster.xml")

        [entry] = fake_ledger.entries
        assert entry.outcome == "rejected"
        assert entry.rejected_count == 3
        assert entry.violations == [
            "SCHEMA VIOLATION: Soldier 1 - Invalid date: 2021-02-30"
        ]

    def test_wrong_root(self, pipeline, make_xml, valid_soldiers):
        result = pipeline.submit(make_xml(valid_soldiers, root="personnel"), "roster.xml")

        assert result.violations == ['SCHEMA VIOLATION: Root element must be "army_records"']
        assert result.rejected_count == 0

    def test_empty_batch(self, pipeline, make_xml):
        result = pipeline.submit(make_xml([]), "roster.xml")

        assert result.violations == ["SCHEMA VIOLATION: At least one soldier record is required"]

    def test_malformed_xml(self, pipeline, areas, fake_ledger):
        result = pipeline.submit(b"<army_records><soldier>", "broken.xml")

        assert result.outcome == "rejected"
        assert len(result.violations) == 1
        assert result.violations[0].startswith("PARSE ERROR: ")
        assert result.rejected_count == 0
        assert areas.exists(EXCEL_EXPORTS, result.annotated_sheet)
        assert fake_ledger.entries[0].violations == result.violations

    def test_malformed_spreadsheet(self, pipeline, tmp_path):
        bogus = tmp_path / "roster.xlsx"
        bogus.write_bytes(b"not a zip archive")

        result = pipeline.submit_file(bogus)

        assert result.outcome == "rejected"
        assert result.violations[0].startswith("PARSE ERROR: ")

    def test_truncated_sheet_xml(self, pipeline, areas, fake_ledger, tmp_path,
                                 make_sheet, sheet_rows, valid_soldiers):
        """A readable archive whose worksheet XML is cut short"""
        source = make_sheet(tmp_path / "source.xlsx", sheet_rows(valid_soldiers))
        damaged = tmp_path / "roster.xlsx"
        with zipfile.ZipFile(source) as src, zipfile.ZipFile(damaged, "w") as dst:
            for item in src.infolist():
                data = src.read(item.filename)
                if item.filename == "xl/worksheets/sheet1.xml":
                    data = data[: len(data) // 2]
                dst.writestr(item, data)

        result = pipeline.submit_file(damaged)

        assert result.outcome == "rejected"
        assert len(result.violations) == 1
        assert result.violations[0].startswith("PARSE ERROR: ")
        assert areas.list(UPLOADS) == []
        assert len(areas.list(INVALID_RECORDS)) == 1
        assert areas.exists(EXCEL_EXPORTS, result.annotated_sheet)
        assert [e.outcome for e in fake_ledger.entries] == ["rejected"]


@pytest.mark.unit
class TestCorrectionLoop:
    """Tests for re-submitting an edited annotated sheet"""

    def test_corrected_sheet_is_accepted(self, pipeline, areas, fake_store, fake_ledger,
                                         tmp_path, make_xml, make_soldiers):
        rejected = pipeline.submit(make_xml(make_soldiers(second={"rank": None})), "roster.xml")

        sheet = areas.resolve_download(rejected.annotated_sheet)
        wb = load_workbook(sheet)
        wb.active["C3"] = "Captain"
        corrected_path = tmp_path / "roster_corrected.xlsx"
        wb.save(corrected_path)

        result = pipeline.resubmit_corrected(corrected_path)

        assert result.success is True
        assert result.outcome == "corrected"
        assert result.accepted_count == 3
        assert fake_store.records["S-1002"].rank == "Captain"
        assert [e.outcome for e in fake_ledger.entries] == ["rejected", "corrected"]

    def test_uncorrected_sheet_is_rejected_again(self, pipeline, areas, fake_store, make_xml, make_soldiers):
        rejected = pipeline.submit(make_xml(make_soldiers(second={"rank": None})), "roster.xml")

        result = pipeline.resubmit_corrected(areas.resolve_download(rejected.annotated_sheet))

        assert result.outcome == "rejected"
        assert result.violations == rejected.violations
        assert fake_store.records == {}

    def test_xml_resubmission_refused(self, pipeline, tmp_path, fake_ledger, valid_xml):
        source = tmp_path / "roster.xml"
        source.write_bytes(valid_xml)

        with pytest.raises(UploadRejectedError, match="must be Excel"):
            pipeline.resubmit_corrected(source)

        assert fake_ledger.entries == []


@pytest.mark.unit
class TestPipelineFailures:
    """Tests for failures that stop a run without a verdict"""

    def test_rejected_upload_writes_no_ledger_entry(self, pipeline, areas, fake_ledger):
        with pytest.raises(UploadRejectedError):
            pipeline.submit(b"id,name", "roster.csv")

        assert fake_ledger.entries == []
        assert areas.list(UPLOADS) == []

    def test_unreachable_store_propagates(self, areas, store_factory, fake_ledger, valid_xml):
        pipeline = ConversionPipeline(areas, store_factory(unreachable=True), fake_ledger)

        with pytest.raises(psycopg.OperationalError):
            pipeline.submit(valid_xml, "roster.xml")

        assert fake_ledger.entries == []
        assert len(areas.list(UPLOADS)) == 1


@pytest.mark.unit
def test_custom_validator_is_used(areas, fake_store, fake_ledger, make_xml, make_soldiers):
    rules = [{
        "rule_name": "status_must_be_active",
        "rule_type": "enum",
        "field_name": "status",
        "parameters": {"allowed": ["Active"], "label": "Status"},
        "severity": "error",
    }]
    pipeline = ConversionPipeline(areas, fake_store, fake_ledger, validator=SchemaValidator(rules))

    result = pipeline.submit(make_xml(make_soldiers()), "roster.xml")

    assert result.outcome == "rejected"
    assert result.violations == [
        "SCHEMA VIOLATION: Soldier 2 - Status must be one of: Active (got: Retired)"
    ]


@pytest.mark.unit
def test_record_refused_by_model_does_not_abort_batch(areas, fake_store, fake_ledger, make_xml, make_soldiers):
    """Length rules downgraded to warnings let an over-long name through validation"""
    rules = [
        rule.model_copy(update={"severity": "warning"}) if rule.rule_type == "max_length" else rule
        for rule in default_soldier_rules()
    ]
    pipeline = ConversionPipeline(areas, fake_store, fake_ledger, validator=SchemaValidator(rules))

    result = pipeline.submit(make_xml(make_soldiers(second={"name": "N" * 101})), "roster.xml")

    assert result.success is True
    assert result.outcome == "validated"
    assert result.accepted_count == 2
    assert result.rejected_count == 1
    assert result.failed_ids == ["S-1002"]
    assert sorted(fake_store.records) == ["S-1001", "S-1003"]
    assert areas.list(UPLOADS) == []
    assert len(areas.list(CORRECTED)) == 1
    [entry] = fake_ledger.entries
    assert (entry.accepted_count, entry.rejected_count) == (2, 1)


@pytest.mark.unit
@pytest.mark.parametrize("field", FIELD_KEYS)
def test_empty_element_and_blank_cell_report_one_presence_violation(
    pipeline, tmp_path, make_xml, make_sheet, sheet_rows, make_soldiers, field
):
    label = FIELDS_BY_KEY[field].label
    expected = [f"SCHEMA VIOLATION: Soldier 3 - Missing required field: {label}"]
    records = make_soldiers(third={field: ""})

    from_xml = pipeline.submit(make_xml(records), "roster.xml")
    from_sheet = pipeline.submit_file(make_sheet(tmp_path / "roster.xlsx", sheet_rows(records)))

    assert from_xml.violations == expected
    assert from_sheet.violations == expected

@pytest.mark.unit
def test_unknown_status_is_rejected_with_value_echoed(pipeline, fake_store, fake_ledger, make_xml, make_soldiers):
    result = pipeline.submit(make_xml(make_soldiers(second={"status": "Missing in Action"})), "roster.xml")

    assert result.outcome == "rejected"
    assert result.violations == [
        "SCHEMA VIOLATION: Soldier 2 - Status must be one of: Active, Retired, Deceased (got: Missing in Action)"
    ]
    assert fake_store.records == {}
    assert fake_ledger.entries[0].violations == result.violations

@pytest.mark.unit
def test_convert_spreadsheet_to_xml(tmp_path, make_sheet, sheet_rows, valid_soldiers):
    sheet = make_sheet(tmp_path / "roster.xlsx", sheet_rows(valid_soldiers))
    output = tmp_path / "roster.xml"

    count = convert_spreadsheet_to_xml(sheet, output)

    assert count == 3
    assert XMLReader().read(str(output)) == {"army_records": {"soldier": valid_soldiers}}
