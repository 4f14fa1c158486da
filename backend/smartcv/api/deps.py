"""
Shared FastAPI dependencies.

External clients are built lazily by the providers below, once per process,
and can be swapped out through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from smartcv.core.errors import Unauthorized
from smartcv.core.security import get_token_subject
from smartcv.db.session import get_db
from smartcv.models import Cv, User
from smartcv.services import (
    CloudinaryStorage,
    CvIngestionPipeline,
    CvRepository,
    DocumentTextExtractor,
    GeminiCvStructurer,
    GoogleIdentityVerifier,
    authorize_cv_owner,
)

# Bearer token extraction; we raise our own 401 so the body stays {"message": ...}
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login", auto_error=False)


# ============== External Service Providers ==============


@lru_cache
def get_storage() -> CloudinaryStorage:
    return CloudinaryStorage()


@lru_cache
def get_text_extractor() -> DocumentTextExtractor:
    return DocumentTextExtractor()


@lru_cache
def get_structurer() -> GeminiCvStructurer:
    return GeminiCvStructurer()


@lru_cache
def get_identity_verifier() -> GoogleIdentityVerifier:
    return GoogleIdentityVerifier()


# ============== Repository & Pipeline ==============


def get_cv_repository(db: Session = Depends(get_db)) -> CvRepository:
    return CvRepository(db)


def get_ingestion_pipeline(
    repository: CvRepository = Depends(get_cv_repository),
    storage: CloudinaryStorage = Depends(get_storage),
    extractor: DocumentTextExtractor = Depends(get_text_extractor),
    structurer: GeminiCvStructurer = Depends(get_structurer),
) -> CvIngestionPipeline:
    return CvIngestionPipeline(
        storage=storage,
        extractor=extractor,
        structurer=structurer,
        repository=repository,
    )


# ============== Authentication & Authorization ==============


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the user from the ``Authorization: Bearer <token>`` header.

    Raises Unauthorized for a missing, malformed or expired token, or one
    whose user no longer exists.
    """
    if not token:
        raise Unauthorized()

    user_id = get_token_subject(token)
    if user_id is None:
        raise Unauthorized()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise Unauthorized()

    return user


def require_cv_owner(
    cv_id: int,
    current_user: User = Depends(get_current_user),
    repository: CvRepository = Depends(get_cv_repository),
) -> Cv:
    """Authorization gate for mutating routes: 404 before 403."""
    return authorize_cv_owner(repository, current_user.id, cv_id)
