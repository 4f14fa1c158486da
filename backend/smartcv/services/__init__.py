from smartcv.services.text_extractor import (
    DocumentTextExtractor,
    extract_text,
    SUPPORTED_MIME_TYPES,
)
from smartcv.services.cv_structurer import GeminiCvStructurer, parse_structured_cv
from smartcv.services.storage import CloudinaryStorage
from smartcv.services.identity import GoogleIdentityVerifier
from smartcv.services.cv_repository import CvRepository, authorize_cv_owner
from smartcv.services.ingestion import CvIngestionPipeline

__all__ = [
    "DocumentTextExtractor",
    "extract_text",
    "SUPPORTED_MIME_TYPES",
    "GeminiCvStructurer",
    "parse_structured_cv",
    "CloudinaryStorage",
    "GoogleIdentityVerifier",
    "CvRepository",
    "authorize_cv_owner",
    "CvIngestionPipeline",
]
