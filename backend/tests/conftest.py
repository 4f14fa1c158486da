from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from smartcv.api import deps
from smartcv.core.security import create_access_token, get_password_hash
from smartcv.db.base import Base
from smartcv.db.session import get_db
from smartcv.main import app
from smartcv.models import Cv, User
from tests.fakes import (
    STRUCTURED_CV,
    FakeExtractor,
    FakeIdentityVerifier,
    FakeStorage,
    FakeStructurer,
)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def users(db_session: Session) -> dict[str, User]:
    user1 = User(
        email="user1@example.com",
        hashed_password=get_password_hash("password123"),
        auth_provider="password",
    )
    user2 = User(
        email="user2@example.com",
        hashed_password=get_password_hash("password456"),
        auth_provider="password",
    )
    db_session.add_all([user1, user2])
    db_session.commit()
    return {"user1": user1, "user2": user2}


@pytest.fixture
def seeded_cvs(db_session: Session, users: dict[str, User]) -> dict[str, Cv]:
    base = datetime(2026, 1, 20, 9, 0, 0)
    older = Cv(
        user_id=users["user1"].id,
        original_file_url="http://example.com/cv1.pdf",
        generated_cv=dict(STRUCTURED_CV),
        created_at=base,
        updated_at=base,
    )
    other_user = Cv(
        user_id=users["user2"].id,
        original_file_url="http://example.com/cv2.pdf",
        generated_cv={"name": "Jane Smith", "skills": ["Figma", "Adobe XD"]},
        created_at=base + timedelta(minutes=1),
        updated_at=base + timedelta(minutes=1),
    )
    newer = Cv(
        user_id=users["user1"].id,
        original_file_url="http://example.com/cv3.pdf",
        generated_cv={"name": "John Doe", "skills": ["Python"]},
        created_at=base + timedelta(minutes=2),
        updated_at=base + timedelta(minutes=2),
    )
    db_session.add_all([older, other_user, newer])
    db_session.commit()
    return {"older": older, "other_user": other_user, "newer": newer}


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(data={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def structurer() -> FakeStructurer:
    return FakeStructurer()


@pytest.fixture
def identity_verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest.fixture
def client(
    db_session: Session,
    storage: FakeStorage,
    extractor: FakeExtractor,
    structurer: FakeStructurer,
    identity_verifier: FakeIdentityVerifier,
):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[deps.get_storage] = lambda: storage
    app.dependency_overrides[deps.get_text_extractor] = lambda: extractor
    app.dependency_overrides[deps.get_structurer] = lambda: structurer
    app.dependency_overrides[deps.get_identity_verifier] = lambda: identity_verifier
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
