"""SQLAlchemy database models."""
from datetime import datetime
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from exam_prep.db.base import Base


class Question(Base):
    """Stored question.

    ``options``, ``correct_answer`` and ``categories`` hold JSON-encoded text;
    ``QuestionStore`` encodes and decodes them.
    """

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)  # single_choice, multiple_choice, true_false
    options = Column(Text, nullable=False, default="[]")
    correct_answer = Column(Text, nullable=False, default="[]")
    explanation = Column(Text, nullable=True)
    categories = Column(Text, nullable=False, default="[]")
    difficulty = Column(String(16), nullable=False, default="medium")
    source = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "type IN ('single_choice', 'multiple_choice', 'true_false')",
            name="check_question_type"
        ),
        CheckConstraint(
            "difficulty IN ('easy', 'medium', 'hard')",
            name="check_question_difficulty"
        ),
        Index("ix_questions_created_at", "created_at"),
        Index("ix_questions_difficulty", "difficulty"),
    )
