from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from smartcv.db.base import Base


class User(Base):
    """Account owning CV records.

    Password accounts carry a bcrypt hash; accounts created through Google
    sign-in have no password and ``auth_provider == "google"``.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    auth_provider = Column(String, nullable=False, default="password")  # 'password' | 'google'
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    cvs = relationship("Cv", back_populates="user")
