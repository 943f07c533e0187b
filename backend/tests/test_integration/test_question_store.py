"""Integration tests for the question store."""
import json
import pytest
from sqlalchemy import select
from exam_prep.core.errors import PersistenceError, QuestionNotFoundError
from exam_prep.db.models import Question
from exam_prep.domain.schemas import (
    Difficulty,
    QuestionDraft,
    QuestionOption,
    QuestionType,
    QuestionUpdate,
)


def _draft(content="Q", **overrides) -> QuestionDraft:
    fields = {
        "content": content,
        "type": QuestionType.SINGLE_CHOICE,
        "options": [
            QuestionOption(text="A. 选项一"),
            QuestionOption(text="B. 选项二", is_correct=True),
        ],
        "correct_answer": ["B"],
        "explanation": "",
        "categories": ["1"],
        "difficulty": Difficulty.MEDIUM,
        "source": "",
    }
    fields.update(overrides)
    return QuestionDraft(**fields)


@pytest.mark.integration
class TestQuestionStore:

    @pytest.mark.asyncio
    async def test_create_round_trips_structured_fields(self, store):
        draft = _draft(categories=["1", "数学"], correct_answer=["A", "B"])

        stored = await store.create(draft)

        assert stored.id is not None
        assert stored.created_at is not None
        assert stored.options == draft.options
        assert stored.correct_answer == draft.correct_answer
        assert stored.categories == draft.categories

        reread = await store.get(stored.id)
        assert reread == stored

    @pytest.mark.asyncio
    async def test_options_stored_in_client_shape(self, store, db_session):
        stored = await store.create(_draft())

        row = (await db_session.execute(select(Question).where(Question.id == stored.id))).scalar_one()
        assert json.loads(row.options) == [
            {"text": "A. 选项一", "isCorrect": False},
            {"text": "B. 选项二", "isCorrect": True},
        ]

    @pytest.mark.asyncio
    async def test_missing_content_fails_without_writing(self, store, db_session):
        with pytest.raises(PersistenceError) as exc_info:
            await store.create(_draft(content=None))

        assert "content" in exc_info.value.message
        rows = (await db_session.execute(select(Question))).scalars().all()
        assert rows == []

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(QuestionNotFoundError):
            await store.get(999)

    @pytest.mark.asyncio
    async def test_list_filters_and_paginates(self, store):
        await store.create(_draft("easy math", difficulty=Difficulty.EASY, categories=["math"]))
        await store.create(_draft("hard math", difficulty=Difficulty.HARD, categories=["math"]))
        await store.create(_draft("tf physics", type=QuestionType.TRUE_FALSE, options=[],
                                  categories=["physics"]))
        await store.create(_draft("hard physics", difficulty=Difficulty.HARD, categories=["physics"]))

        questions, total = await store.list(category="math")
        assert total == 2
        assert [q.content for q in questions] == ["easy math", "hard math"]

        questions, total = await store.list(difficulty=Difficulty.HARD)
        assert [q.content for q in questions] == ["hard math", "hard physics"]

        questions, total = await store.list(question_type=QuestionType.TRUE_FALSE)
        assert [q.content for q in questions] == ["tf physics"]

        questions, total = await store.list(page=2, limit=3)
        assert total == 4
        assert [q.content for q in questions] == ["hard physics"]

    @pytest.mark.asyncio
    async def test_category_filter_matches_whole_ids(self, store):
        await store.create(_draft("in 1", categories=["1"]))
        await store.create(_draft("in 12", categories=["12"]))

        questions, total = await store.list(category="1")

        assert total == 1
        assert questions[0].content == "in 1"

    @pytest.mark.asyncio
    async def test_random_respects_count_and_filters(self, store):
        for i in range(5):
            await store.create(_draft(f"q{i}", difficulty=Difficulty.EASY))
        await store.create(_draft("hard one", difficulty=Difficulty.HARD))

        picked = await store.random(difficulty=Difficulty.EASY, count=3)

        assert len(picked) == 3
        assert all(q.difficulty is Difficulty.EASY for q in picked)

    @pytest.mark.asyncio
    async def test_update_only_touches_given_fields(self, store):
        stored = await store.create(_draft("before"))

        updated = await store.update(
            stored.id,
            QuestionUpdate(content="after", options=[QuestionOption(text="A. only", is_correct=True)]),
        )

        assert updated.content == "after"
        assert updated.options == [QuestionOption(text="A. only", is_correct=True)]
        assert updated.correct_answer == ["B"]
        assert updated.categories == ["1"]

    @pytest.mark.asyncio
    async def test_empty_update_returns_question_unchanged(self, store):
        stored = await store.create(_draft())

        assert await store.update(stored.id, QuestionUpdate()) == stored

    @pytest.mark.asyncio
    async def test_delete(self, store):
        stored = await store.create(_draft())

        await store.delete(stored.id)

        with pytest.raises(QuestionNotFoundError):
            await store.get(stored.id)
        with pytest.raises(QuestionNotFoundError):
            await store.delete(stored.id)
