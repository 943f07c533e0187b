"""Pytest configuration and fixtures."""
from io import BytesIO
from typing import Any, AsyncGenerator, Callable, Dict, List
import pandas as pd
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from exam_prep.main import app
from exam_prep.core.config import settings
from exam_prep.db.session import Database, get_db_session
from exam_prep.domain.services.question_store import QuestionStore


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh file-backed SQLite database per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()

    yield db

    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with database.session() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> QuestionStore:
    return QuestionStore(db_session)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point the import staging directory at a per-test folder."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_path", str(path))
    return path


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, upload_dir) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Admin authentication headers."""
    return {"x-api-key": settings.get_admin_api_keys_list()[0]}


@pytest.fixture
def make_xlsx() -> Callable[[List[Dict[str, Any]]], bytes]:
    """Build an xlsx workbook whose first sheet holds the given rows."""

    def _make(rows: List[Dict[str, Any]], columns: List[str] = None) -> bytes:
        buffer = BytesIO()
        df = pd.DataFrame(rows, columns=columns)
        df.to_excel(buffer, index=False, engine="openpyxl")
        return buffer.getvalue()

    return _make


@pytest.fixture
def sample_json_question() -> Dict[str, Any]:
    return {
        "content": "C",
        "type": "single_choice",
        "options": [
            {"text": "A. x", "isCorrect": False},
            {"text": "B. y", "isCorrect": True},
        ],
        "correctAnswer": ["B"],
        "explanation": "e",
        "categories": [],
        "difficulty": "easy",
    }
