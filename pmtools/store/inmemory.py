"""In-memory implementation of DocumentRepository."""

from pmtools.errors import DocumentExistsError
from pmtools.models.common import DocumentKind
from pmtools.store.repositories import StoredDocument


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository (tests, single process)."""

    def __init__(self) -> None:
        self._collections: dict[DocumentKind, list[StoredDocument]] = {
            kind: [] for kind in DocumentKind
        }

    def list_documents(self, kind: DocumentKind) -> list[StoredDocument]:
        """List documents of ``kind``."""
        return [doc.model_copy(deep=True) for doc in self._collections[kind]]

    def get_document(self, kind: DocumentKind, doc_id: str) -> StoredDocument | None:
        """Get a document by id."""
        for doc in self._collections[kind]:
            if doc.id == doc_id:
                return doc.model_copy(deep=True)
        return None

    def create_document(self, kind: DocumentKind, document: StoredDocument) -> StoredDocument:
        """Append a new document."""
        if any(doc.id == document.id for doc in self._collections[kind]):
            raise DocumentExistsError(f"{kind.label} {document.id} already exists")
        self._collections[kind].append(document.model_copy(deep=True))
        return document

    def replace_document(
        self, kind: DocumentKind, doc_id: str, document: StoredDocument
    ) -> StoredDocument | None:
        """Replace a stored document."""
        docs = self._collections[kind]
        for i, doc in enumerate(docs):
            if doc.id == doc_id:
                docs[i] = document.model_copy(deep=True)
                return document
        return None

    def delete_document(self, kind: DocumentKind, doc_id: str) -> bool:
        """Delete a document."""
        docs = self._collections[kind]
        remaining = [doc for doc in docs if doc.id != doc_id]
        if len(remaining) == len(docs):
            return False
        self._collections[kind] = remaining
        return True
