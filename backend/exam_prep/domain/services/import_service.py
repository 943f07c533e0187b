"""Question bank import: reader, normalizer, store writes and report."""
from typing import List
from exam_prep.core.logging import get_logger
from exam_prep.domain.importers.normalizer import normalize_row
from exam_prep.domain.importers.reader import detect_format, read_rows
from exam_prep.domain.schemas import ImportReport, StoredQuestion
from exam_prep.domain.services.question_store import QuestionStore
from exam_prep.utils.uploads import StagedUpload

logger = get_logger(__name__)


def build_report(questions: List[StoredQuestion]) -> ImportReport:
    """Summarize imported questions for the response body."""
    return ImportReport(
        message=f"{len(questions)} questions imported successfully",
        questions=questions,
    )


class ImportService:
    """Imports a staged question bank file into the store."""

    def __init__(self, store: QuestionStore):
        """Initialize import service.

        Args:
            store: Question store that receives each normalized row
        """
        self.store = store

    async def import_file(self, upload: StagedUpload) -> ImportReport:
        """Import every row of a staged upload.

        Rows are processed strictly in order, each normalized and written
        before the next is read. Each write commits on its own: a failure on
        row k leaves rows 1..k-1 in the store.

        Args:
            upload: Staged JSON or spreadsheet file

        Returns:
            Report with the count and the stored questions

        Raises:
            ValidationError: Unsupported file type or invalid enum value in a row
            ParseError: File cannot be parsed; nothing is written
            PersistenceError: A row could not be stored
        """
        source_format = detect_format(upload.content_type)
        logger.info(
            "import_started",
            filename=upload.filename,
            source_format=source_format.value,
        )

        rows = read_rows(upload.content_type, upload.read_bytes())

        imported: List[StoredQuestion] = []
        for row_number, row in enumerate(rows, start=1):
            try:
                draft = normalize_row(row, source_format, row_number)
                stored = await self.store.create(draft)
            except Exception as e:
                logger.error(
                    "import_aborted",
                    row_number=row_number,
                    committed=len(imported),
                    error=str(e),
                )
                raise
            imported.append(stored)
            logger.debug("import_row_written", row_number=row_number, question_id=stored.id)

        logger.info("import_completed", imported=len(imported))
        return build_report(imported)
