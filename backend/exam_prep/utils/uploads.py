"""Staging of uploaded files on local disk."""
import os
import re
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator
from exam_prep.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\-]+")


@dataclass(frozen=True)
class StagedUpload:
    """An uploaded file written to the staging directory."""
    path: str
    filename: str
    content_type: str

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as fh:
            return fh.read()


def staged_filename(original_name: str) -> str:
    """Build ``<epoch millis>-<sanitized original name>``."""
    base = os.path.basename(original_name or "upload")
    safe = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("._") or "upload"
    return f"{int(time.time() * 1000)}-{safe}"


@contextmanager
def stage_upload(
    content: bytes,
    filename: str,
    content_type: str,
    upload_dir: str,
) -> Iterator[StagedUpload]:
    """Write an upload to ``upload_dir`` and remove it on exit.

    The file is deleted whether the body succeeds or raises.

    Args:
        content: Uploaded bytes
        filename: Client-supplied file name
        content_type: Declared MIME type
        upload_dir: Staging directory, created if missing

    Yields:
        The staged upload
    """
    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, staged_filename(filename))
    with open(path, "wb") as fh:
        fh.write(content)
    logger.debug("upload_staged", path=path, size=len(content))

    try:
        yield StagedUpload(path=path, filename=filename, content_type=content_type)
    finally:
        try:
            os.remove(path)
            logger.debug("upload_removed", path=path)
        except FileNotFoundError:
            logger.warning("upload_already_removed", path=path)
