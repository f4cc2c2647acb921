"""Editing session for one open document.

Ties the form, the auto-save coordinator, the enhancement round-trip and the
exports together. Collaborator failures never escape the public async
operations; they land in ``load_error``, ``save_error``, ``enhance_error``
or ``import_error`` for the UI to show.
"""

import logging
import time
from collections.abc import Callable, Iterable

from pmtools.enhance.importing import (
    append_prd_requirements,
    append_review_requirements,
    newest_first,
    requirements_from_prd,
    requirements_from_review,
)
from pmtools.enhance.merge import (
    apply_prd_changes,
    apply_review_changes,
    prd_accepted_changes,
    review_accepted_changes,
)
from pmtools.enhance.parser import parse_prd_result, parse_review_result
from pmtools.enhance.prompts import build_full_prompt, build_prompt, system_prompt_for
from pmtools.enhance.selection import Reconciliation, prd_reconciliation, review_reconciliation
from pmtools.errors import LoadError, MalformedResponse, PMToolsError, SaveError
from pmtools.export.markdown import generate_prd_markdown, generate_review_markdown
from pmtools.llm.client import DEFAULT_ERROR, CompletionClient
from pmtools.models.common import DocumentKind, new_id, utc_now
from pmtools.models.document import DEFAULT_TITLES, DOCUMENT_MODELS
from pmtools.models.prd import PRDForm
from pmtools.models.review import CodeReviewForm
from pmtools.session.autosave import AutoSaveCoordinator, SaveState
from pmtools.store.gateway import DocumentGateway
from pmtools.store.repositories import StoredDocument
from pmtools.utils.logging import event_logger

logger = logging.getLogger(__name__)

Form = CodeReviewForm | PRDForm

PASTE_ERROR = "Could not parse AI response. Make sure you pasted the full JSON output."
NOT_CONFIGURED = "AI enhancement is not configured"

LOAD_ERRORS: dict[DocumentKind, str] = {
    DocumentKind.code_review: "Could not load review.",
    DocumentKind.prd: "Could not load PRD.",
}

SOURCE_LOAD_ERRORS: dict[DocumentKind, str] = {
    DocumentKind.code_review: "Could not load code reviews.",
    DocumentKind.prd: "Could not load PRDs.",
}


class DocumentSession:
    """One open Code Review or PRD."""

    def __init__(
        self,
        kind: DocumentKind,
        gateway: DocumentGateway,
        completion: CompletionClient | None = None,
        debounce_s: float | None = None,
        id_factory: Callable[[], str] = new_id,
    ):
        """Initialize session.

        Args:
            kind: Document type edited by this session
            gateway: Where documents are loaded from and saved to
            completion: LLM client for ``request_enhancement`` (paste-only if None)
            debounce_s: Auto-save quiet period override
            id_factory: Id generator for new documents and new items
        """
        self.kind = kind
        self.gateway = gateway
        self.completion = completion
        self.id_factory = id_factory
        self.document: StoredDocument | None = None
        self.autosave = AutoSaveCoordinator(self._persist, debounce_s=debounce_s)
        self.enhancement: Reconciliation | None = None
        self.is_enhancing = False
        self.load_error: str | None = None
        self.enhance_error: str | None = None
        self.import_error: str | None = None

    # --- state ---

    def _require_document(self) -> StoredDocument:
        if self.document is None:
            raise RuntimeError("No document is open")
        return self.document

    @property
    def form(self) -> Form:
        return self._require_document().data

    @property
    def save_error(self) -> str | None:
        return self.autosave.error if self.autosave.state is SaveState.ERROR else None

    @property
    def status_text(self) -> str:
        return self.autosave.status_text

    # --- lifecycle ---

    def create_new(self) -> StoredDocument:
        """Open a fresh document with a new id; nothing is stored until the first edit."""
        now = utc_now()
        model = DOCUMENT_MODELS[self.kind]
        self.document = model(
            id=self.id_factory(),
            title=DEFAULT_TITLES[self.kind],
            created_at=now,
            modified_at=now,
        )
        self.load_error = None
        self.enhancement = None
        self.autosave.reset()
        self.autosave.arm()
        return self.document

    async def load(self, doc_id: str) -> bool:
        """Open a stored document; it starts clean."""
        try:
            document = await self.gateway.fetch(self.kind, doc_id)
        except LoadError as e:
            logger.warning(f"Failed to load {self.kind.value} {doc_id}: {e}")
            self.load_error = LOAD_ERRORS[self.kind]
            return False

        self.document = document
        self.load_error = None
        self.enhancement = None
        self.autosave.reset()
        self.autosave.arm()
        return True

    async def close(self) -> None:
        """Flush pending edits, stop the timer and release the gateway."""
        if self.document is not None and self.autosave.is_dirty:
            try:
                await self.autosave.flush()
            except SaveError as e:
                logger.warning(f"Final save of {self.kind.value} failed: {e}")
        await self.autosave.aclose()
        await self.gateway.aclose()

    # --- editing ---

    def mutate(self, fn: Callable[[Form], Form]) -> None:
        """Replace the form with ``fn(form)`` and schedule a save."""
        document = self._require_document()
        self.document = document.model_copy(update={"data": fn(document.data)})
        self.autosave.mark_dirty()

    def update(self, **patch: object) -> None:
        """Patch top-level form fields by attribute name."""
        unknown = set(patch) - set(type(self.form).model_fields)
        if unknown:
            raise ValueError(f"Unknown form fields: {', '.join(sorted(unknown))}")
        self.mutate(lambda form: form.model_copy(update=patch))

    async def _persist(self) -> None:
        document = self._require_document()
        now = utc_now()
        # Snapshot before the first await so later edits go to the next save
        snapshot = document.model_copy(
            update={
                "title": document.data.title or DEFAULT_TITLES[self.kind],
                "modified_at": now,
            },
            deep=True,
        )

        start = time.perf_counter()
        try:
            await self.gateway.save(self.kind, snapshot)
        except SaveError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            event_logger.log_save(snapshot.id, self.kind.value, "error", latency_ms, str(e))
            raise
        latency_ms = (time.perf_counter() - start) * 1000
        event_logger.log_save(snapshot.id, self.kind.value, "success", latency_ms)

        # modifiedAt only moves once the store has the new copy
        current = self._require_document()
        if current.id == snapshot.id:
            self.document = current.model_copy(
                update={"title": snapshot.title, "modified_at": now}
            )

    async def save_now(self) -> bool:
        """Force an immediate save; failures end up in ``save_error``."""
        try:
            await self.autosave.flush(force=True)
        except SaveError:
            return False
        return True

    # --- enhancement ---

    def _reconcile(self, text: str) -> Reconciliation:
        form = self.form
        if isinstance(form, PRDForm):
            return prd_reconciliation(parse_prd_result(text), form)
        return review_reconciliation(parse_review_result(text), form)

    async def request_enhancement(self) -> bool:
        """Save, ask the model for suggestions and hold them for review.

        The form is never touched here; suggestions only reach it through
        ``apply_enhancement``.
        """
        self.enhance_error = None
        doc_id = self._require_document().id
        if self.completion is None:
            self.enhance_error = NOT_CONFIGURED
            return False

        self.is_enhancing = True
        start = time.perf_counter()
        try:
            await self.autosave.flush()
            form = self.form
            text = await self.completion.complete(build_prompt(form), system_prompt_for(form))
            self.enhancement = self._reconcile(text)
        except PMToolsError as e:
            self.enhance_error = str(e) or DEFAULT_ERROR
            event_logger.log_enhancement(
                doc_id,
                self.kind.value,
                "ai",
                "error",
                latency_ms=(time.perf_counter() - start) * 1000,
                error_reason=type(e).__name__,
            )
            return False
        finally:
            self.is_enhancing = False

        event_logger.log_enhancement(
            doc_id,
            self.kind.value,
            "ai",
            "success",
            latency_ms=(time.perf_counter() - start) * 1000,
            suggestion_count=len(self.enhancement.suggestions),
        )
        return True

    def paste_response(self, text: str) -> bool:
        """Run model output pasted by the user through the same pipeline."""
        self.enhance_error = None
        doc_id = self._require_document().id
        try:
            self.enhancement = self._reconcile(text)
        except MalformedResponse:
            self.enhance_error = PASTE_ERROR
            event_logger.log_enhancement(
                doc_id, self.kind.value, "paste", "error", error_reason="MalformedResponse"
            )
            return False

        event_logger.log_enhancement(
            doc_id,
            self.kind.value,
            "paste",
            "success",
            suggestion_count=len(self.enhancement.suggestions),
        )
        return True

    def apply_enhancement(self) -> bool:
        """Merge the selected suggestions into the form and drop the result."""
        reconciliation = self.enhancement
        if reconciliation is None:
            return False
        self.enhancement = None
        if not reconciliation.selected_count and not reconciliation.selected_note_count:
            return False

        if reconciliation.notes_become_items:
            accepted = review_accepted_changes(reconciliation)
            self.mutate(lambda form: apply_review_changes(form, accepted, self.id_factory))
        else:
            prd_accepted = prd_accepted_changes(reconciliation)
            self.mutate(lambda form: apply_prd_changes(form, prd_accepted))
        return True

    def discard_enhancement(self) -> None:
        self.enhancement = None

    def copy_prompt(self) -> str:
        """Full prompt for the manual path through an external AI tool."""
        return build_full_prompt(self.form)

    # --- export ---

    async def export_markdown(self) -> str | None:
        """Save first, then render; None when the save failed."""
        try:
            await self.autosave.flush()
        except SaveError as e:
            logger.warning(f"Export aborted, save failed: {e}")
            return None

        document = self._require_document()
        if isinstance(document.data, PRDForm):
            return generate_prd_markdown(document.data, document.created_at, document.modified_at)
        return generate_review_markdown(document.data, document.created_at)

    # --- cross-document import ---

    @property
    def import_kind(self) -> DocumentKind:
        """The document type requirements are imported from."""
        if self.kind is DocumentKind.code_review:
            return DocumentKind.prd
        return DocumentKind.code_review

    async def import_sources(self) -> list[StoredDocument]:
        """Documents requirements can be imported from, newest first."""
        self.import_error = None
        try:
            return newest_first(await self.gateway.list(self.import_kind))
        except LoadError as e:
            logger.warning(f"Failed to list {self.import_kind.collection}: {e}")
            self.import_error = SOURCE_LOAD_ERRORS[self.import_kind]
            return []

    async def import_requirements(self, source_id: str, ids: Iterable[str] | None = None) -> int:
        """Append requirements from another document; returns how many were added."""
        self.import_error = None
        try:
            source = await self.gateway.fetch(self.import_kind, source_id)
        except LoadError as e:
            logger.warning(f"Failed to load import source {source_id}: {e}")
            self.import_error = LOAD_ERRORS[self.import_kind]
            return 0

        if isinstance(source.data, PRDForm):
            review_items = requirements_from_prd(source.data, ids, self.id_factory)
            if review_items:
                self.mutate(lambda form: append_review_requirements(form, review_items))
            return len(review_items)

        prd_items = requirements_from_review(source.data, source.id, ids, self.id_factory)
        if prd_items:
            self.mutate(lambda form: append_prd_requirements(form, prd_items))
        return len(prd_items)
