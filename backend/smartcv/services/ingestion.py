"""
Ingestion Pipeline - from an uploaded file to a stored CV record.

Stages run strictly in order and the first failure stops the run:

    storage -> text extraction -> AI structuring -> persistence

A CV row is written only after every stage succeeded. A failure after the
upload leaves the stored blob behind; it is logged and not cleaned up.
"""

import logging
from typing import Any, Optional, Protocol

from smartcv.core.errors import NoFile, PipelineError
from smartcv.models import Cv
from smartcv.services.cv_repository import CvRepository

# Configure logging for the ingestion pipeline
logger = logging.getLogger("ingestion")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '📄 [INGESTION] %(message)s'
    ))
    logger.addHandler(handler)


class BlobStorage(Protocol):
    def upload(self, file_bytes: bytes, filename: str) -> str: ...


class TextExtractor(Protocol):
    def extract_text(self, file_bytes: bytes, mime_type: str) -> str: ...


class CvStructurer(Protocol):
    def structure(self, raw_text: str) -> dict[str, Any]: ...


class CvIngestionPipeline:
    """Sequences the adapters and persists the result."""

    def __init__(
        self,
        storage: BlobStorage,
        extractor: TextExtractor,
        structurer: CvStructurer,
        repository: CvRepository,
    ):
        self.storage = storage
        self.extractor = extractor
        self.structurer = structurer
        self.repository = repository

    def ingest(
        self,
        user_id: int,
        file_bytes: Optional[bytes],
        mime_type: str,
        filename: str,
    ) -> Cv:
        """
        Run the full pipeline for one uploaded file.

        Args:
            user_id: Owner of the resulting record
            file_bytes: Uploaded file contents
            mime_type: MIME type declared by the client
            filename: Original filename (used for the stored object's format)

        Returns:
            The newly created CV record

        Raises:
            NoFile: no bytes were supplied
            StorageFailure, UnsupportedType, ExtractionFailure, GenerationFailure:
                the corresponding stage failed; nothing was persisted
        """
        if not file_bytes:
            raise NoFile()

        logger.info(f"▶ User {user_id}: ingesting '{filename}' ({mime_type}, {len(file_bytes)} bytes)")

        # 1. Original file -> blob storage
        file_url = self.storage.upload(file_bytes, filename)
        logger.info(f"Stored original at {file_url}")

        # 2 + 3. Text extraction and structuring; the blob is orphaned if either fails
        try:
            raw_text = self.extractor.extract_text(file_bytes, mime_type)
            logger.info(f"Extracted {len(raw_text)} characters")

            generated_cv = self.structurer.structure(raw_text)
        except PipelineError as e:
            logger.error(f"❌ {e.kind}: {e.message}")
            logger.warning(f"Orphaned upload left in storage: {file_url}")
            raise

        # 4. Persist exactly one record
        cv = self.repository.create(
            user_id=user_id,
            original_file_url=file_url,
            generated_cv=generated_cv,
        )
        logger.info(f"✅ Created CV {cv.id} for user {user_id}")
        return cv
