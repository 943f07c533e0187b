"""Question store: persistence for question drafts.

Structured fields (options, correct answers, categories) live in TEXT
columns as JSON; this module is the only place that encodes and decodes them.
"""
import json
from typing import Any, List, Optional, Tuple
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from exam_prep.core.errors import PersistenceError, QuestionNotFoundError
from exam_prep.core.logging import get_logger
from exam_prep.db.models import Question
from exam_prep.domain.schemas import (
    Difficulty,
    QuestionDraft,
    QuestionOption,
    QuestionType,
    QuestionUpdate,
    StoredQuestion,
)

logger = get_logger(__name__)

_JSON_FIELDS = {"options", "correct_answer", "categories"}


def encode_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def encode_options(options: List[QuestionOption]) -> str:
    """Encode options in the client shape, ``{"text", "isCorrect"}``."""
    return encode_json([option.model_dump(by_alias=True) for option in options])


def decode_question(row: Question) -> StoredQuestion:
    """Convert a stored row into the client-facing shape."""
    return StoredQuestion(
        id=row.id,
        content=row.content,
        type=row.type,
        options=json.loads(row.options),
        correct_answer=json.loads(row.correct_answer),
        explanation=row.explanation,
        categories=json.loads(row.categories),
        difficulty=row.difficulty,
        source=row.source,
        created_at=row.created_at,
    )


class QuestionStore:
    """Repository for questions, bound to one session."""

    def __init__(self, session: AsyncSession):
        """Initialize store.

        Args:
            session: Async SQLAlchemy session
        """
        self.session = session

    async def create(self, draft: QuestionDraft) -> StoredQuestion:
        """Insert a draft as its own unit of work and read it back.

        Args:
            draft: Normalized question

        Returns:
            Stored question as re-read from the database

        Raises:
            PersistenceError: On any database failure; the row is rolled back
        """
        data = draft.model_dump(mode="json")
        row = Question(
            content=data["content"],
            type=data["type"],
            options=encode_options(draft.options),
            correct_answer=encode_json(data["correct_answer"]),
            explanation=data["explanation"],
            categories=encode_json(data["categories"]),
            difficulty=data["difficulty"],
            source=data["source"],
        )

        try:
            self.session.add(row)
            await self.session.commit()
            stored = await self._fetch(row.id)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("question_insert_failed", error=str(e))
            raise PersistenceError(str(e.orig) if getattr(e, "orig", None) else str(e)) from e

        logger.debug("question_created", question_id=stored.id)
        return decode_question(stored)

    async def get(self, question_id: int) -> StoredQuestion:
        """Get a question by id.

        Raises:
            QuestionNotFoundError: If no such question exists
        """
        return decode_question(await self._get_row(question_id))

    async def list(
        self,
        category: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        question_type: Optional[QuestionType] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[StoredQuestion], int]:
        """List questions oldest first.

        Args:
            category: Category reference that must appear in ``categories``
            difficulty: Difficulty filter
            question_type: Type filter
            page: 1-based page number
            limit: Page size

        Returns:
            (questions on the page, total matching questions)
        """
        filters = self._filters(category, difficulty, question_type)
        count_stmt = select(func.count()).select_from(Question).where(*filters)
        stmt = (
            select(Question)
            .where(*filters)
            .order_by(Question.created_at.asc(), Question.id.asc())
            .limit(limit)
            .offset((page - 1) * limit)
        )

        try:
            total = (await self.session.execute(count_stmt)).scalar_one()
            rows = (await self.session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

        return [decode_question(row) for row in rows], total

    async def random(
        self,
        category: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        question_type: Optional[QuestionType] = None,
        count: int = 10,
    ) -> List[StoredQuestion]:
        """Pick up to ``count`` random questions matching the filters."""
        stmt = (
            select(Question)
            .where(*self._filters(category, difficulty, question_type))
            .order_by(func.random())
            .limit(count)
        )
        try:
            rows = (await self.session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
        return [decode_question(row) for row in rows]

    async def update(self, question_id: int, changes: QuestionUpdate) -> StoredQuestion:
        """Apply a partial update.

        Fields not set on ``changes`` are left as stored.
        """
        row = await self._get_row(question_id)
        data = changes.model_dump(mode="json", exclude_unset=True)
        if not data:
            return decode_question(row)

        for field, value in data.items():
            if field == "options":
                value = encode_options(changes.options or [])
            elif field in _JSON_FIELDS:
                value = encode_json(value if value is not None else [])
            setattr(row, field, value)

        try:
            await self.session.commit()
            row = await self._fetch(question_id)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e

        logger.info("question_updated", question_id=question_id, fields=sorted(data))
        return decode_question(row)

    async def delete(self, question_id: int) -> None:
        """Delete a question.

        Raises:
            QuestionNotFoundError: If no such question exists
        """
        row = await self._get_row(question_id)
        try:
            await self.session.delete(row)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(str(e)) from e

        logger.info("question_deleted", question_id=question_id)

    async def _get_row(self, question_id: int) -> Question:
        try:
            row = await self._fetch(question_id)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
        if row is None:
            raise QuestionNotFoundError(question_id)
        return row

    async def _fetch(self, question_id: int) -> Optional[Question]:
        stmt = (
            select(Question)
            .where(Question.id == question_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _filters(
        category: Optional[str],
        difficulty: Optional[Difficulty],
        question_type: Optional[QuestionType],
    ) -> List[Any]:
        filters = []
        if difficulty:
            filters.append(Question.difficulty == Difficulty(difficulty).value)
        if question_type:
            filters.append(Question.type == QuestionType(question_type).value)
        if category:
            filters.append(Question.categories.contains(encode_json(category), autoescape=True))
        return filters
