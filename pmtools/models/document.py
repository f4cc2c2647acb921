"""Persisted document envelope - a tagged union on ``type``."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from pmtools.models.common import CamelModel, DocumentKind, new_id, utc_now
from pmtools.models.prd import PRDForm
from pmtools.models.review import CodeReviewForm


class DocumentBase(CamelModel):
    """Fields shared by every stored document.

    ``id`` and ``created_at`` are assigned once at creation; ``modified_at``
    moves forward on every persist.
    """

    id: str = Field(default_factory=new_id)
    title: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)


class CodeReviewDocument(DocumentBase):
    type: Literal["code-review"] = "code-review"
    data: CodeReviewForm = Field(default_factory=CodeReviewForm)


class PRDDocument(DocumentBase):
    type: Literal["prd"] = "prd"
    data: PRDForm = Field(default_factory=PRDForm)


Document = Annotated[CodeReviewDocument | PRDDocument, Field(discriminator="type")]

document_adapter: TypeAdapter[CodeReviewDocument | PRDDocument] = TypeAdapter(Document)

DOCUMENT_MODELS: dict[DocumentKind, type[CodeReviewDocument] | type[PRDDocument]] = {
    DocumentKind.code_review: CodeReviewDocument,
    DocumentKind.prd: PRDDocument,
}

DEFAULT_TITLES: dict[DocumentKind, str] = {
    DocumentKind.code_review: "Untitled",
    DocumentKind.prd: "Untitled PRD",
}
