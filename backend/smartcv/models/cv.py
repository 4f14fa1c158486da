from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import relationship

from smartcv.db.base import Base


class Cv(Base):
    """
    A stored CV: the uploaded original plus its AI-structured version.

    Rows are only written once the whole ingestion pipeline has succeeded.
    ``generated_cv`` is opaque JSON and is replaced wholesale on update.
    """

    __tablename__ = "cvs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    original_file_url = Column(String, nullable=True)

    # Format: {"name", "email", "phone", "education": [...], "experience": [...], "skills": [...]}
    generated_cv = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="cvs")
