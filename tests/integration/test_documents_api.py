"""Integration tests for the document CRUD routes."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from pmtools.api.deps import get_repository
from pmtools.main import app
from pmtools.models.common import DocumentKind
from pmtools.models.document import CodeReviewDocument, PRDDocument
from pmtools.store.inmemory import InMemoryDocumentRepository
from pmtools.store.json_file import JsonFileDocumentRepository


def _review_body(doc_id: str = "rev-1", title: str = "Checkout") -> dict[str, Any]:
    doc = CodeReviewDocument(id=doc_id, title=title)
    return doc.model_dump(mode="json", by_alias=True)


def _prd_body(doc_id: str = "prd-1") -> dict[str, Any]:
    return PRDDocument(id=doc_id, title="Search").model_dump(mode="json", by_alias=True)


class TestDocumentCrud:
    """Happy-path CRUD for both collections."""

    @pytest.mark.parametrize(
        ("collection", "body"),
        [("reviews", _review_body()), ("prds", _prd_body())],
    )
    def test_create_get_list_delete(
        self, client: TestClient, collection: str, body: dict[str, Any]
    ) -> None:
        created = client.post(f"/api/{collection}", json=body)
        assert created.status_code == 201
        assert created.json()["id"] == body["id"]

        fetched = client.get(f"/api/{collection}/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == created.json()

        listed = client.get(f"/api/{collection}")
        assert [doc["id"] for doc in listed.json()] == [body["id"]]

        deleted = client.delete(f"/api/{collection}/{body['id']}")
        assert deleted.status_code == 204
        assert deleted.content == b""

        assert client.get(f"/api/{collection}/{body['id']}").status_code == 404

    def test_responses_use_camel_case(self, client: TestClient) -> None:
        response = client.post("/api/reviews", json=_review_body())

        data = response.json()
        assert data["type"] == "code-review"
        assert "modifiedAt" in data
        assert "outOfScope" in data["data"]

    def test_put_replaces_document(
        self, client: TestClient, repo: InMemoryDocumentRepository
    ) -> None:
        client.post("/api/reviews", json=_review_body())

        response = client.put("/api/reviews/rev-1", json=_review_body(title="Renamed"))

        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"
        stored = repo.get_document(DocumentKind.code_review, "rev-1")
        assert stored is not None
        assert stored.title == "Renamed"

    def test_collections_are_independent(self, client: TestClient) -> None:
        client.post("/api/reviews", json=_review_body())

        assert client.get("/api/prds").json() == []
        assert client.get("/api/prds/rev-1").status_code == 404


class TestDocumentErrors:
    """Error statuses carry an {"error": message} body."""

    def test_unknown_id_is_404(self, client: TestClient) -> None:
        for method in ("get", "delete"):
            response = getattr(client, method)("/api/reviews/missing")
            assert response.status_code == 404
            assert response.json() == {"error": "Not found"}

        response = client.put("/api/reviews/missing", json=_review_body("missing"))
        assert response.status_code == 404

    def test_duplicate_create_is_409(self, client: TestClient) -> None:
        client.post("/api/prds", json=_prd_body())

        response = client.post("/api/prds", json=_prd_body())

        assert response.status_code == 409
        assert "error" in response.json()

    def test_id_mismatch_is_400(self, client: TestClient) -> None:
        client.post("/api/reviews", json=_review_body())

        response = client.put("/api/reviews/rev-1", json=_review_body("other"))

        assert response.status_code == 400
        assert "does not match" in response.json()["error"]

    def test_wrong_document_type_is_422(self, client: TestClient) -> None:
        response = client.post("/api/reviews", json=_prd_body())

        assert response.status_code == 422
        assert response.json()["error"].startswith("Body is not a valid review document")

    def test_non_object_body_is_422(self, client: TestClient) -> None:
        response = client.post("/api/reviews", json=["not", "a", "document"])

        assert response.status_code == 422
        assert response.json()["error"].startswith("Invalid request body")

    def test_storage_failure_is_500(
        self, client: TestClient, repo: InMemoryDocumentRepository
    ) -> None:
        with patch.object(repo, "list_documents", side_effect=OSError("disk gone")):
            response = client.get("/api/reviews")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to read reviews"}

    def test_write_failure_is_500(
        self, client: TestClient, repo: InMemoryDocumentRepository
    ) -> None:
        with patch.object(repo, "create_document", side_effect=OSError("read-only")):
            response = client.post("/api/prds", json=_prd_body())

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create PRD"}


@pytest.fixture
def file_client(tmp_path: Path) -> Iterator[TestClient]:
    """Test client backed by a JSON-file repository in a scratch directory.

    Server exceptions are rendered rather than re-raised so the 500 body can
    be checked.
    """
    repository = JsonFileDocumentRepository(tmp_path)
    app.dependency_overrides[get_repository] = lambda: repository
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.pop(get_repository, None)


class TestUnexpectedFailures:
    """Every 500 carries an {"error": message} body."""

    def test_collection_file_holding_null_is_500(
        self, file_client: TestClient, tmp_path: Path
    ) -> None:
        (tmp_path / "reviews.json").write_text("null")

        response = file_client.get("/api/reviews")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to read reviews"}

    def test_uncaught_exception_is_json_500(self, file_client: TestClient) -> None:
        with patch.object(
            JsonFileDocumentRepository, "list_documents", side_effect=RuntimeError("boom")
        ):
            response = file_client.get("/api/prds")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
