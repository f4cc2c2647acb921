"""Document CRUD endpoints, one router per document kind.

- GET    /api/{collection}        list all
- GET    /api/{collection}/{id}   get one (404 if unknown)
- POST   /api/{collection}        create (201, 409 if the id exists)
- PUT    /api/{collection}/{id}   replace (404 if unknown, 400 on id mismatch)
- DELETE /api/{collection}/{id}   delete (204, 404 if unknown)
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Response, status
from pydantic import ValidationError

from pmtools.api.deps import get_repository
from pmtools.api.errors import ApiError
from pmtools.errors import DocumentExistsError
from pmtools.models.common import DocumentKind
from pmtools.models.document import DOCUMENT_MODELS
from pmtools.store.repositories import DocumentRepository, StoredDocument
from pmtools.utils.metrics import metrics

logger = logging.getLogger(__name__)

NOT_FOUND = "Not found"

# Storage failures: unreadable/corrupt file, filesystem errors
STORAGE_ERRORS = (OSError, ValueError)


def _dump(document: StoredDocument) -> dict[str, Any]:
    return document.model_dump(mode="json", by_alias=True)


def _parse(kind: DocumentKind, body: dict[str, Any]) -> StoredDocument:
    try:
        return DOCUMENT_MODELS[kind].model_validate(body)
    except ValidationError as e:
        metrics.inc_document_op(kind.value, "validate", "invalid")
        raise ApiError(422, f"Body is not a valid {kind.label} document: {e.error_count()} error(s)")


def build_document_router(kind: DocumentKind) -> APIRouter:
    """Create the CRUD router for one document kind."""
    router = APIRouter(prefix=f"/api/{kind.collection}", tags=[kind.collection])

    @router.get("")
    async def list_documents(
        repo: Annotated[DocumentRepository, Depends(get_repository)],
    ) -> list[dict[str, Any]]:
        try:
            documents = repo.list_documents(kind)
        except STORAGE_ERRORS as e:
            metrics.inc_document_op(kind.value, "list", "error")
            logger.exception(f"Failed to read {kind.collection}: {e}")
            raise ApiError(500, f"Failed to read {kind.collection}")
        metrics.inc_document_op(kind.value, "list", "success")
        return [_dump(doc) for doc in documents]

    @router.get("/{doc_id}")
    async def get_document(
        doc_id: str,
        repo: Annotated[DocumentRepository, Depends(get_repository)],
    ) -> dict[str, Any]:
        try:
            document = repo.get_document(kind, doc_id)
        except STORAGE_ERRORS as e:
            metrics.inc_document_op(kind.value, "get", "error")
            logger.exception(f"Failed to get {kind.label} {doc_id}: {e}")
            raise ApiError(500, f"Failed to get {kind.label}")
        if document is None:
            metrics.inc_document_op(kind.value, "get", "not_found")
            raise ApiError(404, NOT_FOUND)
        metrics.inc_document_op(kind.value, "get", "success")
        return _dump(document)

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_document(
        body: Annotated[dict[str, Any], Body()],
        repo: Annotated[DocumentRepository, Depends(get_repository)],
    ) -> dict[str, Any]:
        document = _parse(kind, body)
        try:
            repo.create_document(kind, document)
        except DocumentExistsError as e:
            metrics.inc_document_op(kind.value, "create", "conflict")
            raise ApiError(409, str(e))
        except STORAGE_ERRORS as e:
            metrics.inc_document_op(kind.value, "create", "error")
            logger.exception(f"Failed to create {kind.label}: {e}")
            raise ApiError(500, f"Failed to create {kind.label}")
        metrics.inc_document_op(kind.value, "create", "success")
        return _dump(document)

    @router.put("/{doc_id}")
    async def replace_document(
        doc_id: str,
        body: Annotated[dict[str, Any], Body()],
        repo: Annotated[DocumentRepository, Depends(get_repository)],
    ) -> dict[str, Any]:
        document = _parse(kind, body)
        if document.id != doc_id:
            metrics.inc_document_op(kind.value, "update", "invalid")
            raise ApiError(400, f"Body id {document.id} does not match URL id {doc_id}")
        try:
            stored = repo.replace_document(kind, doc_id, document)
        except STORAGE_ERRORS as e:
            metrics.inc_document_op(kind.value, "update", "error")
            logger.exception(f"Failed to update {kind.label} {doc_id}: {e}")
            raise ApiError(500, f"Failed to update {kind.label}")
        if stored is None:
            metrics.inc_document_op(kind.value, "update", "not_found")
            raise ApiError(404, NOT_FOUND)
        metrics.inc_document_op(kind.value, "update", "success")
        return _dump(stored)

    @router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_document(
        doc_id: str,
        repo: Annotated[DocumentRepository, Depends(get_repository)],
    ) -> Response:
        try:
            deleted = repo.delete_document(kind, doc_id)
        except STORAGE_ERRORS as e:
            metrics.inc_document_op(kind.value, "delete", "error")
            logger.exception(f"Failed to delete {kind.label} {doc_id}: {e}")
            raise ApiError(500, f"Failed to delete {kind.label}")
        if not deleted:
            metrics.inc_document_op(kind.value, "delete", "not_found")
            raise ApiError(404, NOT_FOUND)
        metrics.inc_document_op(kind.value, "delete", "success")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


reviews_router = build_document_router(DocumentKind.code_review)
prds_router = build_document_router(DocumentKind.prd)
