"""API dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from exam_prep.core.security import require_admin
from exam_prep.db.session import get_db_session
from exam_prep.domain.services.question_store import QuestionStore


async def get_question_store(
    session: AsyncSession = Depends(get_db_session),
) -> QuestionStore:
    """Question store bound to the request's session."""
    return QuestionStore(session)


async def get_admin_question_store(
    api_key: str = Depends(require_admin),
    store: QuestionStore = Depends(get_question_store),
) -> QuestionStore:
    """Question store for admin-only endpoints."""
    return store
