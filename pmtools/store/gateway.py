"""Client-side document gateways used by the editing session.

``HttpDocumentGateway`` talks to the REST API; ``RepositoryGateway`` wraps a
repository in-process. Both expose the same async surface so the session
does not care where documents live.
"""

import logging
from typing import Protocol

import httpx

from pmtools.config import get_settings
from pmtools.errors import DocumentExistsError, LoadError, SaveError
from pmtools.models.common import DocumentKind
from pmtools.models.document import DOCUMENT_MODELS
from pmtools.store.repositories import DocumentRepository, StoredDocument

logger = logging.getLogger(__name__)


class DocumentGateway(Protocol):
    """Async persistence surface seen by the editing session."""

    async def save(self, kind: DocumentKind, document: StoredDocument) -> StoredDocument:
        """Create or replace ``document``.

        Raises:
            SaveError: If the document could not be persisted
        """
        ...

    async def fetch(self, kind: DocumentKind, doc_id: str) -> StoredDocument:
        """Fetch one document.

        Raises:
            LoadError: If the id is unknown, the store is unreachable or the
                reply is not a valid document
        """
        ...

    async def list(self, kind: DocumentKind) -> list[StoredDocument]:
        """List documents of ``kind``.

        Raises:
            LoadError: If the store is unreachable or the reply is invalid
        """
        ...

    async def delete(self, kind: DocumentKind, doc_id: str) -> None:
        """Delete one document.

        Raises:
            SaveError: If the id is unknown or the store is unreachable
        """
        ...

    async def aclose(self) -> None:
        """Release resources the gateway created itself."""
        ...


class HttpDocumentGateway:
    """Gateway backed by the ``/api/reviews`` and ``/api/prds`` routes."""

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None):
        """Initialize HTTP gateway.

        Args:
            base_url: API server root (defaults to ``settings.api_base_url``)
            client: Optional httpx client (for testing with mocks); an injected
                client is left open by ``aclose``
        """
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._close_client = client is None
        self.client = client or httpx.AsyncClient(timeout=10.0)

    def _url(self, kind: DocumentKind, doc_id: str | None = None) -> str:
        url = f"{self.base_url}/api/{kind.collection}"
        return f"{url}/{doc_id}" if doc_id else url

    async def aclose(self) -> None:
        """Close the httpx client if this gateway created it."""
        if self._close_client:
            await self.client.aclose()

    async def save(self, kind: DocumentKind, document: StoredDocument) -> StoredDocument:
        """PUT the document, falling back to POST when it does not exist yet."""
        payload = document.model_dump(mode="json", by_alias=True)
        try:
            response = await self.client.put(self._url(kind, document.id), json=payload)
            if response.status_code == 404:
                response = await self.client.post(self._url(kind), json=payload)
        except httpx.TransportError as e:
            raise SaveError(f"Could not reach the document store: {type(e).__name__}") from e

        if not response.is_success:
            raise SaveError(f"Save failed with status {response.status_code}")
        return document

    async def fetch(self, kind: DocumentKind, doc_id: str) -> StoredDocument:
        try:
            response = await self.client.get(self._url(kind, doc_id))
        except httpx.TransportError as e:
            raise LoadError(f"Could not reach the document store: {type(e).__name__}") from e

        if response.status_code == 404:
            raise LoadError(f"{kind.label} {doc_id} not found")
        if not response.is_success:
            raise LoadError(f"Load failed with status {response.status_code}")
        # JSONDecodeError and ValidationError are both ValueErrors
        try:
            return DOCUMENT_MODELS[kind].model_validate(response.json())
        except ValueError as e:
            raise LoadError(f"Store returned an invalid {kind.label}") from e

    async def list(self, kind: DocumentKind) -> list[StoredDocument]:
        try:
            response = await self.client.get(self._url(kind))
        except httpx.TransportError as e:
            raise LoadError(f"Could not reach the document store: {type(e).__name__}") from e

        if not response.is_success:
            raise LoadError(f"List failed with status {response.status_code}")
        model = DOCUMENT_MODELS[kind]
        try:
            body = response.json()
            if not isinstance(body, list):
                raise ValueError(f"expected a JSON array, got {type(body).__name__}")
            return [model.model_validate(entry) for entry in body]
        except ValueError as e:
            raise LoadError(f"Store returned an invalid {kind.collection} list") from e

    async def delete(self, kind: DocumentKind, doc_id: str) -> None:
        try:
            response = await self.client.delete(self._url(kind, doc_id))
        except httpx.TransportError as e:
            raise SaveError(f"Could not reach the document store: {type(e).__name__}") from e

        if not response.is_success:
            raise SaveError(f"Delete failed with status {response.status_code}")


class RepositoryGateway:
    """In-process gateway over any DocumentRepository."""

    def __init__(self, repository: DocumentRepository):
        self.repository = repository

    async def save(self, kind: DocumentKind, document: StoredDocument) -> StoredDocument:
        try:
            if self.repository.replace_document(kind, document.id, document) is None:
                self.repository.create_document(kind, document)
        except (OSError, ValueError, DocumentExistsError) as e:
            raise SaveError(str(e)) from e
        return document

    async def fetch(self, kind: DocumentKind, doc_id: str) -> StoredDocument:
        try:
            document = self.repository.get_document(kind, doc_id)
        except (OSError, ValueError) as e:
            raise LoadError(str(e)) from e
        if document is None:
            raise LoadError(f"{kind.label} {doc_id} not found")
        return document

    async def list(self, kind: DocumentKind) -> list[StoredDocument]:
        try:
            return self.repository.list_documents(kind)
        except (OSError, ValueError) as e:
            raise LoadError(str(e)) from e

    async def delete(self, kind: DocumentKind, doc_id: str) -> None:
        try:
            deleted = self.repository.delete_document(kind, doc_id)
        except (OSError, ValueError) as e:
            raise SaveError(str(e)) from e
        if not deleted:
            raise SaveError(f"{kind.label} {doc_id} not found")

    async def aclose(self) -> None:
        pass
