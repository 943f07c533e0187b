"""Error taxonomy for the question bank.

Every error carries the HTTP status it maps to, so routes can let them
propagate and the application-level handler renders ``{"message": ...}``.
"""


class QuestionBankError(Exception):
    """Base class for domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuestionBankError):
    """Rejected input: bad upload type/size or out-of-set enum values."""

    status_code = 400


class ParseError(QuestionBankError):
    """Uploaded payload could not be decoded (malformed JSON, unreadable workbook)."""

    status_code = 500


class PersistenceError(QuestionBankError):
    """Store write or read failed."""

    status_code = 500


class QuestionNotFoundError(QuestionBankError):
    """No question with the requested id."""

    status_code = 404

    def __init__(self, question_id: int):
        super().__init__("Question not found")
        self.question_id = question_id
