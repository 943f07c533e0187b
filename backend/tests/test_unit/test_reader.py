"""Unit tests for the ingestion reader."""
import json
import pytest
from exam_prep.core.config import JSON_CONTENT_TYPE, XLS_CONTENT_TYPE, XLSX_CONTENT_TYPE
from exam_prep.core.errors import ParseError, ValidationError
from exam_prep.domain.importers.reader import SourceFormat, detect_format, read_rows


@pytest.mark.unit
class TestDetectFormat:

    @pytest.mark.parametrize(
        "content_type,expected",
        [
            (JSON_CONTENT_TYPE, SourceFormat.JSON),
            ("application/json; charset=utf-8", SourceFormat.JSON),
            (XLSX_CONTENT_TYPE, SourceFormat.SPREADSHEET),
            (XLS_CONTENT_TYPE, SourceFormat.SPREADSHEET),
        ],
    )
    def test_supported_types(self, content_type, expected):
        assert detect_format(content_type) is expected

    @pytest.mark.parametrize("content_type", ["text/csv", "text/plain", "", None])
    def test_unsupported_types(self, content_type):
        with pytest.raises(ValidationError):
            detect_format(content_type)


@pytest.mark.unit
class TestJsonPayloads:

    def test_rows_are_question_objects(self, sample_json_question):
        payload = json.dumps({"questions": [sample_json_question, {"content": "2"}]}).encode()

        rows = list(read_rows(JSON_CONTENT_TYPE, payload))

        assert rows == [sample_json_question, {"content": "2"}]

    def test_utf8_with_bom(self):
        payload = "\ufeff" + json.dumps({"questions": [{"content": "中文"}]}, ensure_ascii=False)

        rows = list(read_rows(JSON_CONTENT_TYPE, payload.encode("utf-8")))

        assert rows[0]["content"] == "中文"

    def test_empty_questions_is_not_an_error(self):
        assert list(read_rows(JSON_CONTENT_TYPE, b'{"questions": []}')) == []

    def test_malformed_json(self):
        with pytest.raises(ParseError):
            read_rows(JSON_CONTENT_TYPE, b"this is not json")

    @pytest.mark.parametrize(
        "payload",
        [
            b"[]",
            b'{"items": []}',
            b'{"questions": {"content": "x"}}',
            b'{"questions": ["x"]}',
        ],
    )
    def test_wrong_document_shape(self, payload):
        with pytest.raises(ParseError):
            read_rows(JSON_CONTENT_TYPE, payload)

    def test_rows_are_single_pass(self):
        rows = read_rows(JSON_CONTENT_TYPE, b'{"questions": [{"content": "a"}]}')

        assert len(list(rows)) == 1
        assert list(rows) == []


@pytest.mark.unit
class TestSpreadsheetPayloads:

    def test_header_row_names_fields(self, make_xlsx):
        payload = make_xlsx([
            {
                "content": "Capital of France?",
                "type": "single_choice",
                "optionA": "A. Paris",
                "optionB": "B. Lyon",
                "correctAnswer": "A",
            },
            {
                "content": "Water is wet",
                "type": "true_false",
                "optionA": None,
                "optionB": None,
                "correctAnswer": "A",
            },
        ])

        rows = list(read_rows(XLSX_CONTENT_TYPE, payload))

        assert len(rows) == 2
        assert rows[0]["content"] == "Capital of France?"
        assert rows[0]["optionA"] == "A. Paris"
        assert rows[1]["optionA"] is None

    def test_numeric_cells_are_read_as_text(self, make_xlsx):
        payload = make_xlsx([{"content": 42, "type": "true_false", "correctAnswer": "A"}])

        rows = list(read_rows(XLSX_CONTENT_TYPE, payload))

        assert rows[0]["content"] == "42"

    def test_blank_rows_are_skipped(self, make_xlsx):
        blank = {"content": None, "type": None, "optionA": None, "correctAnswer": None}
        payload = make_xlsx([
            {"content": "Q1", "type": "true_false", "optionA": None, "correctAnswer": "A"},
            blank,
            {"content": "Q2", "type": "true_false", "optionA": None, "correctAnswer": "B"},
        ])

        rows = list(read_rows(XLSX_CONTENT_TYPE, payload))

        assert [row["content"] for row in rows] == ["Q1", "Q2"]
        assert rows[1]["correctAnswer"] == "B"

    def test_empty_sheet(self, make_xlsx):
        payload = make_xlsx([], columns=["content", "type", "optionA", "correctAnswer"])

        assert list(read_rows(XLSX_CONTENT_TYPE, payload)) == []

    def test_unreadable_workbook(self):
        with pytest.raises(ParseError):
            read_rows(XLSX_CONTENT_TYPE, b"definitely not a zip archive")
