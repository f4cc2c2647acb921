"""JSON-file implementation of DocumentRepository.

Each collection lives in ``<data_dir>/<collection>.json`` as a JSON array,
pretty-printed with 2-space indentation. Every operation re-reads the whole
file and writes it back in full; there is no locking, so concurrent writers
race and the last write wins.
"""

import json
import logging
from pathlib import Path

from pmtools.errors import DocumentExistsError
from pmtools.models.common import DocumentKind
from pmtools.models.document import DOCUMENT_MODELS
from pmtools.store.repositories import StoredDocument

logger = logging.getLogger(__name__)


class JsonFileDocumentRepository:
    """File-backed repository, one JSON array per document kind."""

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    def _path(self, kind: DocumentKind) -> Path:
        return self.data_dir / f"{kind.collection}.json"

    def _read(self, kind: DocumentKind) -> list[StoredDocument]:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(kind)
        if not path.exists():
            # First access creates an empty collection
            path.write_text("[]", encoding="utf-8")
            return []

        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"{path} does not hold a JSON array")
        model = DOCUMENT_MODELS[kind]
        return [model.model_validate(entry) for entry in raw]

    def _write(self, kind: DocumentKind, documents: list[StoredDocument]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        payload = [doc.model_dump(mode="json", by_alias=True) for doc in documents]
        self._path(kind).write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def list_documents(self, kind: DocumentKind) -> list[StoredDocument]:
        """List documents of ``kind`` in file order."""
        return self._read(kind)

    def get_document(self, kind: DocumentKind, doc_id: str) -> StoredDocument | None:
        """Get a document by id."""
        for doc in self._read(kind):
            if doc.id == doc_id:
                return doc
        return None

    def create_document(self, kind: DocumentKind, document: StoredDocument) -> StoredDocument:
        """Append a new document to the collection file."""
        docs = self._read(kind)
        if any(doc.id == document.id for doc in docs):
            raise DocumentExistsError(f"{kind.label} {document.id} already exists")
        docs.append(document)
        self._write(kind, docs)
        logger.debug(f"Created {kind.value} {document.id} in {self._path(kind)}")
        return document

    def replace_document(
        self, kind: DocumentKind, doc_id: str, document: StoredDocument
    ) -> StoredDocument | None:
        """Replace a document in the collection file."""
        docs = self._read(kind)
        for i, doc in enumerate(docs):
            if doc.id == doc_id:
                docs[i] = document
                self._write(kind, docs)
                return document
        return None

    def delete_document(self, kind: DocumentKind, doc_id: str) -> bool:
        """Delete a document from the collection file."""
        docs = self._read(kind)
        remaining = [doc for doc in docs if doc.id != doc_id]
        if len(remaining) == len(docs):
            return False
        self._write(kind, remaining)
        return True
