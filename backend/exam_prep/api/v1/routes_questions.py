"""Question endpoints, including bulk import from JSON or Excel files."""
import math
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from exam_prep.api.deps import get_admin_question_store, get_question_store
from exam_prep.core.config import settings
from exam_prep.core.errors import ValidationError
from exam_prep.core.logging import get_logger
from exam_prep.domain.schemas import (
    Difficulty,
    ImportReport,
    MessageResponse,
    QuestionDraft,
    QuestionListResponse,
    QuestionType,
    QuestionUpdate,
    StoredQuestion,
)
from exam_prep.domain.services.import_service import ImportService
from exam_prep.domain.services.question_store import QuestionStore
from exam_prep.utils.uploads import stage_upload

logger = get_logger(__name__)
router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("", response_model=QuestionListResponse)
async def list_questions(
    category: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    type: Optional[QuestionType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    store: QuestionStore = Depends(get_question_store),
):
    """List questions, oldest first, with optional filters."""
    questions, total = await store.list(
        category=category,
        difficulty=difficulty,
        question_type=type,
        page=page,
        limit=limit,
    )
    return QuestionListResponse(
        questions=questions,
        page=page,
        pages=math.ceil(total / limit),
        total=total,
    )


@router.get("/random", response_model=List[StoredQuestion])
async def random_questions(
    category: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    type: Optional[QuestionType] = None,
    count: int = Query(10, ge=1, le=500),
    store: QuestionStore = Depends(get_question_store),
):
    """Random sample of questions for drill mode."""
    return await store.random(
        category=category,
        difficulty=difficulty,
        question_type=type,
        count=count,
    )


@router.post("/import", response_model=ImportReport, status_code=201)
async def import_questions(
    file: Optional[UploadFile] = File(None),
    store: QuestionStore = Depends(get_admin_question_store),
):
    """Import a question bank from a JSON or Excel file.

    JSON files carry ``{"questions": [...]}`` in the canonical question shape.
    Excel files use the first sheet with columns ``content``, ``type``,
    ``optionA``..``optionE``, ``correctAnswer`` (comma separated),
    ``explanation``, ``categories``, ``difficulty`` and ``source``.
    """
    if file is None:
        raise ValidationError("No file uploaded")

    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in settings.get_allowed_upload_types():
        raise ValidationError("Only Excel and JSON files are allowed")

    limit = settings.max_file_size
    if file.size is not None and file.size > limit:
        raise ValidationError(f"File too large: {file.size} bytes (limit {limit})")

    content = await file.read(limit + 1)
    if len(content) > limit:
        raise ValidationError(f"File too large: more than {limit} bytes")

    logger.info(
        "import_request",
        filename=file.filename,
        content_type=content_type,
        size=len(content),
    )

    with stage_upload(content, file.filename, content_type, settings.upload_path) as upload:
        report = await ImportService(store).import_file(upload)

    return report


@router.get("/{question_id}", response_model=StoredQuestion)
async def get_question(
    question_id: int,
    store: QuestionStore = Depends(get_question_store),
):
    """Get question by ID."""
    return await store.get(question_id)


@router.post("", response_model=StoredQuestion, status_code=201)
async def create_question(
    data: QuestionDraft,
    store: QuestionStore = Depends(get_admin_question_store),
):
    """Create a single question."""
    question = await store.create(data)
    logger.info("question_created", question_id=question.id)
    return question


@router.put("/{question_id}", response_model=StoredQuestion)
async def update_question(
    question_id: int,
    data: QuestionUpdate,
    store: QuestionStore = Depends(get_admin_question_store),
):
    """Update the fields present in the body."""
    return await store.update(question_id, data)


@router.delete("/{question_id}", response_model=MessageResponse)
async def delete_question(
    question_id: int,
    store: QuestionStore = Depends(get_admin_question_store),
):
    """Delete a question."""
    await store.delete(question_id)
    return MessageResponse(message="Question deleted")
