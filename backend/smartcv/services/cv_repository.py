"""
CV persistence and ownership checks.

The repository is user-agnostic: callers pass the owning user id explicitly,
and ownership of existing records is enforced by ``authorize_cv_owner``.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from smartcv.core.errors import Forbidden, NotFound
from smartcv.models import Cv

CV_NOT_FOUND_MESSAGE = "CV not found"


class CvRepository:
    """CRUD operations on CV records."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        original_file_url: Optional[str],
        generated_cv: dict[str, Any],
    ) -> Cv:
        cv = Cv(
            user_id=user_id,
            original_file_url=original_file_url,
            generated_cv=generated_cv,
        )
        self.db.add(cv)
        self.db.commit()
        self.db.refresh(cv)
        return cv

    def list_by_user(self, user_id: int) -> list[Cv]:
        """All CVs owned by ``user_id``, newest first."""
        return (
            self.db.query(Cv)
            .filter(Cv.user_id == user_id)
            .order_by(Cv.created_at.desc(), Cv.id.desc())
            .all()
        )

    def get_by_id(self, cv_id: int) -> Cv:
        cv = self.db.query(Cv).filter(Cv.id == cv_id).first()
        if cv is None:
            raise NotFound(CV_NOT_FOUND_MESSAGE)
        return cv

    def update(self, cv_id: int, generated_cv: dict[str, Any]) -> Cv:
        """Replace the structured CV wholesale. URL and owner are untouched."""
        cv = self.get_by_id(cv_id)
        cv.generated_cv = generated_cv
        self.db.commit()
        self.db.refresh(cv)
        return cv

    def delete(self, cv_id: int) -> None:
        cv = self.get_by_id(cv_id)
        self.db.delete(cv)
        self.db.commit()


def authorize_cv_owner(repository: CvRepository, caller_id: int, cv_id: int) -> Cv:
    """
    Ensure ``caller_id`` owns CV ``cv_id``.

    Existence is checked before ownership, so an unknown id is always
    NotFound, never Forbidden.

    Raises:
        NotFound: no CV with that id
        Forbidden: the CV belongs to another user
    """
    cv = repository.get_by_id(cv_id)
    if cv.user_id != caller_id:
        raise Forbidden("Access denied")
    return cv
