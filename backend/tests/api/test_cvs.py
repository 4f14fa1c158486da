from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from smartcv.core.config import Settings, get_settings
from smartcv.core.errors import GenerationFailure, StorageFailure
from smartcv.main import app
from smartcv.models import Cv, User
from tests.fakes import STORED_URL, STRUCTURED_CV, FakeExtractor, FakeStorage, FakeStructurer

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


# ============== Authentication ==============


def test_cv_routes_require_bearer_token(client: TestClient, users: dict[str, User]) -> None:
    for headers in ({}, {"Authorization": "Token abc"}, {"Authorization": "Bearer not-a-jwt"}):
        response = client.get("/cvs", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid token"}


def test_token_for_unknown_user_is_rejected(client: TestClient, auth_headers) -> None:
    ghost = User(id=999, email="ghost@example.com")

    response = client.get("/cvs", headers=auth_headers(ghost))

    assert response.status_code == 401


# ============== Upload ==============


def test_upload_creates_record(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
    storage: FakeStorage,
    structurer: FakeStructurer,
) -> None:
    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("john.docx", b"PK\x03\x04 docx bytes", DOCX_TYPE)},
    )

    assert response.status_code == 201
    body = response.json()
    assert set(body) == {"id", "userId", "original_file_url", "generated_cv", "createdAt", "updatedAt"}
    assert body["userId"] == users["user1"].id
    assert body["original_file_url"] == STORED_URL
    assert body["generated_cv"] == STRUCTURED_CV
    assert storage.calls == [(b"PK\x03\x04 docx bytes", "john.docx")]
    assert len(structurer.calls) == 1


def test_upload_without_file(client: TestClient, users: dict[str, User], auth_headers) -> None:
    response = client.post("/cvs/upload", headers=auth_headers(users["user1"]))

    assert response.status_code == 400
    assert response.json() == {"message": "No file uploaded"}


def test_upload_empty_file(client: TestClient, users: dict[str, User], auth_headers) -> None:
    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("empty.pdf", b"", "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json() == {"message": "No file uploaded"}


def test_upload_rejects_other_types(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
    storage: FakeStorage,
) -> None:
    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("photo.png", b"\x89PNG\r\n", "image/png")},
    )

    assert response.status_code == 400
    assert "Invalid file type" in response.json()["message"]
    assert storage.calls == []


def test_upload_rejects_oversized_files(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
    storage: FakeStorage,
) -> None:
    app.dependency_overrides[get_settings] = lambda: Settings(MAX_UPLOAD_SIZE_MB=1)

    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("big.pdf", b"0" * (1024 * 1024 + 1), "application/pdf")},
    )

    assert response.status_code == 400
    assert storage.calls == []


def test_oversized_upload_is_rejected_before_reading(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
    storage: FakeStorage,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    reads: list[int] = []

    async def tracking_read(self, size: int = -1) -> bytes:
        reads.append(size)
        return b""

    monkeypatch.setattr(UploadFile, "read", tracking_read)
    app.dependency_overrides[get_settings] = lambda: Settings(MAX_UPLOAD_SIZE_MB=1)

    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("big.pdf", b"0" * (1024 * 1024 + 1), "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json() == {"message": "File too large. Maximum size is 1MB."}
    assert reads == []
    assert storage.calls == []


def test_upload_accepts_content_type_parameters(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
    extractor: FakeExtractor,
) -> None:
    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("john.pdf", b"%PDF-1.4", "application/pdf; charset=binary")},
    )

    assert response.status_code == 201
    assert extractor.calls == [(b"%PDF-1.4", "application/pdf")]


def test_pipeline_failure_is_500_and_persists_nothing(
    client: TestClient,
    db_session: Session,
    users: dict[str, User],
    auth_headers,
    structurer: FakeStructurer,
) -> None:
    structurer.error = GenerationFailure("Gemini CV generation failed: invalid JSON")

    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("john.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}
    assert db_session.query(Cv).count() == 0


def test_storage_failure_is_500(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
    storage: FakeStorage,
) -> None:
    storage.error = StorageFailure("Cloudinary upload failed: 401 invalid signature")

    response = client.post(
        "/cvs/upload",
        headers=auth_headers(users["user1"]),
        files={"file": ("john.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 500
    assert "signature" not in response.text


# ============== Read ==============


def test_list_is_scoped_and_newest_first(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    response = client.get("/cvs", headers=auth_headers(users["user1"]))

    assert response.status_code == 200
    ids = [cv["id"] for cv in response.json()]
    assert ids == [seeded_cvs["newer"].id, seeded_cvs["older"].id]
    assert all(cv["userId"] == users["user1"].id for cv in response.json())


def test_list_empty_for_user_without_cvs(client: TestClient, users: dict[str, User], auth_headers) -> None:
    response = client.get("/cvs", headers=auth_headers(users["user2"]))

    assert response.status_code == 200
    assert response.json() == []


def test_get_by_id_round_trips_document(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    response = client.get(f"/cvs/{seeded_cvs['older'].id}", headers=auth_headers(users["user1"]))

    assert response.status_code == 200
    assert response.json()["generated_cv"] == STRUCTURED_CV


def test_get_by_id_missing(client: TestClient, users: dict[str, User], auth_headers) -> None:
    response = client.get("/cvs/4242", headers=auth_headers(users["user1"]))

    assert response.status_code == 404
    assert response.json() == {"message": "CV not found"}


def test_get_by_id_does_not_check_owner_by_default(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    response = client.get(f"/cvs/{seeded_cvs['older'].id}", headers=auth_headers(users["user2"]))

    assert response.status_code == 200


def test_get_by_id_checks_owner_when_enforced(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    app.dependency_overrides[get_settings] = lambda: Settings(ENFORCE_CV_READ_OWNERSHIP=True)

    foreign = client.get(f"/cvs/{seeded_cvs['older'].id}", headers=auth_headers(users["user2"]))
    own = client.get(f"/cvs/{seeded_cvs['older'].id}", headers=auth_headers(users["user1"]))

    assert foreign.status_code == 403
    assert foreign.json() == {"message": "Access denied"}
    assert own.status_code == 200


# ============== Update ==============


def test_update_replaces_generated_cv(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    cv_id = seeded_cvs["older"].id
    new_cv = {"name": "John A. Doe", "skills": ["Go"]}

    response = client.put(f"/cvs/{cv_id}", headers=auth_headers(users["user1"]), json={"generated_cv": new_cv})

    assert response.status_code == 200
    body = response.json()
    assert body["generated_cv"] == new_cv
    assert body["original_file_url"] == "http://example.com/cv1.pdf"
    assert body["userId"] == users["user1"].id


def test_update_without_content(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    response = client.put(f"/cvs/{seeded_cvs['older'].id}", headers=auth_headers(users["user1"]), json={})

    assert response.status_code == 400
    assert response.json() == {"message": "No CV content provided"}


def test_update_by_non_owner_is_forbidden(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    response = client.put(
        f"/cvs/{seeded_cvs['older'].id}",
        headers=auth_headers(users["user2"]),
        json={"generated_cv": {"name": "Hijacked"}},
    )

    assert response.status_code == 403
    assert response.json() == {"message": "Access denied"}


def test_update_missing_is_not_found_even_for_non_owner(
    client: TestClient,
    users: dict[str, User],
    auth_headers,
) -> None:
    response = client.put("/cvs/4242", headers=auth_headers(users["user2"]), json={"generated_cv": {}})

    assert response.status_code == 404


# ============== Delete ==============


def test_delete_then_delete_again(
    client: TestClient,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    cv_id = seeded_cvs["older"].id
    headers = auth_headers(users["user1"])

    first = client.delete(f"/cvs/{cv_id}", headers=headers)
    second = client.delete(f"/cvs/{cv_id}", headers=headers)

    assert first.status_code == 200
    assert first.json() == {"message": "CV deleted successfully"}
    assert second.status_code == 404


def test_delete_by_non_owner_is_forbidden(
    client: TestClient,
    db_session: Session,
    users: dict[str, User],
    seeded_cvs: dict[str, Cv],
    auth_headers,
) -> None:
    cv_id = seeded_cvs["older"].id

    response = client.delete(f"/cvs/{cv_id}", headers=auth_headers(users["user2"]))

    assert response.status_code == 403
    assert db_session.query(Cv).filter(Cv.id == cv_id).count() == 1
