"""Tests for the JSON-file document repository."""

import json
from pathlib import Path

import pytest

from pmtools.errors import DocumentExistsError
from pmtools.models.common import DocumentKind
from pmtools.models.document import CodeReviewDocument, PRDDocument
from pmtools.models.review import CodeReviewForm
from pmtools.store.json_file import JsonFileDocumentRepository

REVIEW = DocumentKind.code_review


@pytest.fixture
def file_repo(tmp_path: Path) -> JsonFileDocumentRepository:
    return JsonFileDocumentRepository(tmp_path / "data")


def test_first_read_creates_empty_collection(file_repo: JsonFileDocumentRepository) -> None:
    assert file_repo.list_documents(REVIEW) == []
    assert (file_repo.data_dir / "reviews.json").read_text() == "[]"


def test_create_writes_pretty_camel_case_json(file_repo: JsonFileDocumentRepository) -> None:
    doc = CodeReviewDocument(id="d1", title="T", data=CodeReviewForm(title="T"))

    file_repo.create_document(REVIEW, doc)

    text = (file_repo.data_dir / "reviews.json").read_text()
    assert text.startswith('[\n  {\n    "id": "d1"')
    stored = json.loads(text)
    assert stored[0]["type"] == "code-review"
    assert "createdAt" in stored[0]
    assert stored[0]["data"]["outOfScope"] == []


def test_collections_are_separate_files(file_repo: JsonFileDocumentRepository) -> None:
    file_repo.create_document(REVIEW, CodeReviewDocument(id="d1"))
    file_repo.create_document(DocumentKind.prd, PRDDocument(id="p1"))

    assert [d.id for d in file_repo.list_documents(REVIEW)] == ["d1"]
    assert [d.id for d in file_repo.list_documents(DocumentKind.prd)] == ["p1"]


def test_duplicate_create_is_rejected(file_repo: JsonFileDocumentRepository) -> None:
    file_repo.create_document(REVIEW, CodeReviewDocument(id="d1"))

    with pytest.raises(DocumentExistsError):
        file_repo.create_document(REVIEW, CodeReviewDocument(id="d1"))


def test_replace_and_delete(file_repo: JsonFileDocumentRepository) -> None:
    file_repo.create_document(REVIEW, CodeReviewDocument(id="d1", title="Old"))

    replaced = file_repo.replace_document(REVIEW, "d1", CodeReviewDocument(id="d1", title="New"))
    missing = file_repo.replace_document(REVIEW, "nope", CodeReviewDocument(id="nope"))

    assert replaced is not None
    assert missing is None
    stored = file_repo.get_document(REVIEW, "d1")
    assert stored is not None
    assert stored.title == "New"

    assert file_repo.delete_document(REVIEW, "d1") is True
    assert file_repo.delete_document(REVIEW, "d1") is False
    assert file_repo.get_document(REVIEW, "d1") is None


def test_legacy_gap_flag_is_upgraded_on_read(file_repo: JsonFileDocumentRepository) -> None:
    file_repo.data_dir.mkdir(parents=True)
    (file_repo.data_dir / "reviews.json").write_text(
        json.dumps(
            [
                {
                    "id": "old",
                    "type": "code-review",
                    "title": "Legacy",
                    "createdAt": "2024-01-01T00:00:00Z",
                    "modifiedAt": "2024-01-01T00:00:00Z",
                    "data": {
                        "title": "Legacy",
                        "requirements": [],
                        "gaps": [{"id": "g1", "description": "x", "resolved": True}],
                        "recommendations": [],
                        "outOfScope": [],
                    },
                }
            ]
        )
    )

    doc = file_repo.get_document(REVIEW, "old")

    assert doc is not None
    assert doc.data.gaps[0].status.value == "RESOLVED"


def test_corrupt_file_raises(file_repo: JsonFileDocumentRepository) -> None:
    file_repo.data_dir.mkdir(parents=True)
    (file_repo.data_dir / "reviews.json").write_text("{not json")

    with pytest.raises(ValueError):
        file_repo.list_documents(REVIEW)


def test_non_array_file_raises(file_repo: JsonFileDocumentRepository) -> None:
    file_repo.data_dir.mkdir(parents=True)
    (file_repo.data_dir / "reviews.json").write_text("null")

    with pytest.raises(ValueError, match="JSON array"):
        file_repo.list_documents(REVIEW)
