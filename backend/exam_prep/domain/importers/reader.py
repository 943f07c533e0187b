"""Ingestion reader: uploaded bytes to raw rows."""
import json
from enum import Enum
from typing import Any, Dict, Iterator, List
from jsonschema import validate, ValidationError as JsonSchemaValidationError
from exam_prep.core.config import JSON_CONTENT_TYPE, XLS_CONTENT_TYPE, XLSX_CONTENT_TYPE
from exam_prep.core.errors import ParseError, ValidationError
from exam_prep.core.logging import get_logger
from exam_prep.utils.excel import dataframe_to_dict_list, parse_first_sheet

logger = get_logger(__name__)

RawRow = Dict[str, Any]

# Shape of a JSON question bank; rows themselves are checked by the normalizer
IMPORT_PAYLOAD_SCHEMA = {
    "type": "object",
    "properties": {
        "questions": {
            "type": "array",
            "items": {"type": "object"},
        },
    },
    "required": ["questions"],
}


class SourceFormat(str, Enum):
    JSON = "json"
    SPREADSHEET = "spreadsheet"


_FORMATS_BY_CONTENT_TYPE = {
    JSON_CONTENT_TYPE: SourceFormat.JSON,
    XLSX_CONTENT_TYPE: SourceFormat.SPREADSHEET,
    XLS_CONTENT_TYPE: SourceFormat.SPREADSHEET,
}


def detect_format(content_type: str) -> SourceFormat:
    """Map a declared MIME type to a source format.

    Raises:
        ValidationError: For types that are neither JSON nor a spreadsheet
    """
    media_type = (content_type or "").split(";")[0].strip().lower()
    try:
        return _FORMATS_BY_CONTENT_TYPE[media_type]
    except KeyError:
        raise ValidationError("Only Excel and JSON files are allowed") from None


def read_rows(content_type: str, payload: bytes) -> Iterator[RawRow]:
    """Parse an uploaded question bank into raw rows.

    Parsing happens before this function returns, so a malformed payload
    fails here rather than midway through an import. The returned iterator
    is single pass.

    Args:
        content_type: Declared MIME type of the upload
        payload: File content

    Returns:
        Iterator over raw rows in source order

    Raises:
        ValidationError: Unsupported content type
        ParseError: Payload cannot be decoded
    """
    source_format = detect_format(content_type)
    if source_format is SourceFormat.JSON:
        rows = _parse_json(payload)
    else:
        rows = _parse_spreadsheet(payload)

    logger.info("rows_read", source_format=source_format.value, row_count=len(rows))
    return iter(rows)


def _parse_json(payload: bytes) -> List[RawRow]:
    try:
        document = json.loads(payload.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"Invalid JSON file: {e}") from e

    try:
        validate(instance=document, schema=IMPORT_PAYLOAD_SCHEMA)
    except JsonSchemaValidationError as e:
        raise ParseError(f"Invalid question bank JSON: {e.message}") from e

    return document["questions"]


def _parse_spreadsheet(payload: bytes) -> List[RawRow]:
    try:
        df = parse_first_sheet(payload)
    except Exception as e:
        raise ParseError(f"Unreadable spreadsheet: {e}") from e

    return dataframe_to_dict_list(df)
