"""Pydantic schemas for API validation.

Wire names are camelCase (``isCorrect``, ``correctAnswer``, ``createdAt``) to
match the client; attributes are snake_case.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common/Base Schemas
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime


class MessageResponse(BaseModel):
    """Plain message body, used for errors and deletions."""
    message: str


# ============================================================================
# Question Schemas
# ============================================================================

class QuestionType(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


CHOICE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE)


class QuestionOption(BaseModel):
    """One answer option."""
    model_config = ConfigDict(populate_by_name=True)

    text: str
    is_correct: bool = Field(default=False, alias="isCorrect")


class QuestionDraft(BaseModel):
    """Canonical question prior to storage.

    ``content`` is not checked for emptiness; a missing content is rejected by
    the store's NOT NULL constraint.
    """
    model_config = ConfigDict(populate_by_name=True)

    content: Optional[str] = None
    type: QuestionType
    options: List[QuestionOption] = Field(default_factory=list)
    correct_answer: List[str] = Field(default_factory=list, alias="correctAnswer")
    explanation: Optional[str] = ""
    categories: List[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM
    source: Optional[str] = ""


class QuestionUpdate(BaseModel):
    """Partial question update; unset fields are left untouched."""
    model_config = ConfigDict(populate_by_name=True)

    content: Optional[str] = None
    type: Optional[QuestionType] = None
    options: Optional[List[QuestionOption]] = None
    correct_answer: Optional[List[str]] = Field(None, alias="correctAnswer")
    explanation: Optional[str] = None
    categories: Optional[List[str]] = None
    difficulty: Optional[Difficulty] = None
    source: Optional[str] = None


class StoredQuestion(QuestionDraft):
    """Question as persisted and returned to clients."""
    id: int
    content: str
    created_at: datetime = Field(..., alias="createdAt")


class QuestionListResponse(BaseModel):
    """Paginated question list."""
    questions: List[StoredQuestion]
    page: int
    pages: int
    total: int


# ============================================================================
# Import Schemas
# ============================================================================

class ImportReport(BaseModel):
    """Result of a question bank import."""
    message: str
    questions: List[StoredQuestion]
