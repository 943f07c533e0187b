"""Row normalizer: raw rows to canonical question drafts."""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
from pydantic import ValidationError as PydanticValidationError
from exam_prep.core.errors import ValidationError
from exam_prep.domain.importers.reader import RawRow, SourceFormat
from exam_prep.domain.schemas import (
    CHOICE_TYPES,
    Difficulty,
    QuestionDraft,
    QuestionOption,
    QuestionType,
)

E = TypeVar("E", bound=Enum)

OPTION_COLUMNS = ("optionA", "optionB", "optionC", "optionD", "optionE")


@dataclass(frozen=True)
class ColumnSpec:
    """Where a draft field comes from in a spreadsheet row, and its default."""
    field: str
    column: str
    default: Callable[[], Any]


# Option and answer columns are handled separately (see _spreadsheet_options)
SPREADSHEET_COLUMNS = (
    ColumnSpec("content", "content", lambda: None),
    ColumnSpec("type", "type", lambda: None),
    ColumnSpec("explanation", "explanation", lambda: ""),
    ColumnSpec("categories", "categories", list),
    ColumnSpec("difficulty", "difficulty", lambda: None),
    ColumnSpec("source", "source", lambda: ""),
)


def normalize_row(row: RawRow, source_format: SourceFormat, row_number: int) -> QuestionDraft:
    """Map one raw row to a question draft.

    Args:
        row: Raw row from the reader
        source_format: Format the row was read from
        row_number: 1-based position, used in error messages

    Returns:
        Question draft

    Raises:
        ValidationError: Unknown type or difficulty, or malformed options
    """
    if source_format is SourceFormat.SPREADSHEET:
        return _normalize_spreadsheet_row(row, row_number)
    return _normalize_json_row(row, row_number)


def parse_enum(enum_cls: Type[E], value: Any, field: str, row_number: int) -> E:
    """Parse ``value`` into ``enum_cls`` or fail with a row-tagged error."""
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Row {row_number}: invalid {field} {value!r} (expected one of: {allowed})"
        ) from None


def parse_difficulty(value: Any, row_number: int) -> Difficulty:
    if _is_blank(value):
        return Difficulty.MEDIUM
    return parse_enum(Difficulty, value, "difficulty", row_number)


def split_answer_tokens(value: Any) -> List[str]:
    """Split a ``correctAnswer`` cell on commas, trimming each token."""
    if _is_blank(value):
        return []
    return [token.strip() for token in str(value).split(",")]


def mark_correct_options(options: List[QuestionOption], tokens: List[str]) -> None:
    """Flag options whose text starts with one of the answer tokens.

    Relies on option text carrying its own letter, e.g. ``"A. Paris"``.
    """
    for option in options:
        if option.text[:1] in tokens:
            option.is_correct = True


def _normalize_spreadsheet_row(row: RawRow, row_number: int) -> QuestionDraft:
    values: Dict[str, Any] = {}
    for spec in SPREADSHEET_COLUMNS:
        cell = _cell(row, spec.column)
        values[spec.field] = spec.default() if cell is None else cell

    question_type = parse_enum(QuestionType, values["type"], "type", row_number)
    options = _spreadsheet_options(row, question_type)
    correct_answer = split_answer_tokens(_cell(row, "correctAnswer"))
    mark_correct_options(options, correct_answer)

    categories = values["categories"]
    if isinstance(categories, str):
        categories = [c.strip() for c in categories.split(",") if c.strip()]

    return QuestionDraft(
        content=values["content"],
        type=question_type,
        options=options,
        correct_answer=correct_answer,
        explanation=values["explanation"],
        categories=categories,
        difficulty=parse_difficulty(values["difficulty"], row_number),
        source=values["source"],
    )


def _spreadsheet_options(row: RawRow, question_type: QuestionType) -> List[QuestionOption]:
    if question_type not in CHOICE_TYPES:
        return []

    options = []
    for column in OPTION_COLUMNS:
        text = _cell(row, column)
        if text is not None:
            options.append(QuestionOption(text=text, is_correct=False))
    return options


def _normalize_json_row(row: RawRow, row_number: int) -> QuestionDraft:
    question_type = parse_enum(QuestionType, row.get("type"), "type", row_number)
    difficulty = parse_difficulty(row.get("difficulty"), row_number)

    try:
        return QuestionDraft(
            content=row.get("content"),
            type=question_type,
            options=row.get("options") or [],
            correct_answer=_as_text_list(row.get("correctAnswer")),
            explanation=_or_default(row.get("explanation"), ""),
            categories=_as_text_list(row.get("categories")),
            difficulty=difficulty,
            source=_or_default(row.get("source"), ""),
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Row {row_number}: {_first_error(e)}") from e


def _cell(row: RawRow, column: str) -> Optional[str]:
    """Return a spreadsheet cell as text, or None when it is empty."""
    value = row.get(column)
    if _is_blank(value):
        return None
    return str(value)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def _as_text_list(value: Any) -> Any:
    # Category ids and answer keys are opaque strings; numeric ids are stringified
    if not value:
        return []
    if isinstance(value, list):
        return [item if isinstance(item, str) else str(item) for item in value]
    return value


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def _first_error(error: PydanticValidationError) -> str:
    detail = error.errors()[0]
    location = ".".join(str(part) for part in detail["loc"])
    return f"{location}: {detail['msg']}"
