"""Repository protocol for document persistence."""

from typing import Protocol

from pmtools.models.common import DocumentKind
from pmtools.models.document import CodeReviewDocument, PRDDocument

StoredDocument = CodeReviewDocument | PRDDocument


class DocumentRepository(Protocol):
    """Repository for one collection per document kind."""

    def list_documents(self, kind: DocumentKind) -> list[StoredDocument]:
        """List every stored document of ``kind`` in storage order."""
        ...

    def get_document(self, kind: DocumentKind, doc_id: str) -> StoredDocument | None:
        """Get a document by id.

        Returns:
            The document or None if not found
        """
        ...

    def create_document(self, kind: DocumentKind, document: StoredDocument) -> StoredDocument:
        """Append a new document.

        Raises:
            DocumentExistsError: If the id is already taken
        """
        ...

    def replace_document(
        self, kind: DocumentKind, doc_id: str, document: StoredDocument
    ) -> StoredDocument | None:
        """Replace a stored document wholesale.

        Returns:
            The stored document or None if ``doc_id`` is unknown
        """
        ...

    def delete_document(self, kind: DocumentKind, doc_id: str) -> bool:
        """Delete a document.

        Returns:
            True if something was deleted
        """
        ...
