"""Copy requirements between a PRD and a Code Review.

Imported items always get fresh ids so they never alias the source
document's items; the source document is left untouched.
"""

from collections.abc import Callable, Iterable, Sequence

from pmtools.models.common import RequirementStatus, new_id
from pmtools.models.document import CodeReviewDocument, PRDDocument
from pmtools.models.prd import PRDForm, PRDRequirementItem
from pmtools.models.review import CodeReviewForm, RequirementItem


def _selected(items: Sequence, ids: Iterable[str] | None) -> list:
    # None selects everything, matching the pre-checked import dialog
    if ids is None:
        return list(items)
    wanted = set(ids)
    return [item for item in items if item.id in wanted]


def requirements_from_prd(
    prd: PRDForm,
    ids: Iterable[str] | None = None,
    id_factory: Callable[[], str] = new_id,
) -> list[RequirementItem]:
    """Turn PRD requirements into Code Review requirements (status INCOMPLETE)."""
    return [
        RequirementItem(
            id=id_factory(),
            status=RequirementStatus.INCOMPLETE,
            description=item.description,
        )
        for item in _selected(prd.requirements, ids)
    ]


def requirements_from_review(
    review: CodeReviewForm,
    source_review_id: str | None = None,
    ids: Iterable[str] | None = None,
    id_factory: Callable[[], str] = new_id,
) -> list[PRDRequirementItem]:
    """Turn Code Review requirements into PRD requirements linked to their review."""
    return [
        PRDRequirementItem(
            id=id_factory(),
            description=item.description,
            source_review_id=source_review_id,
        )
        for item in _selected(review.requirements, ids)
    ]


def append_review_requirements(
    form: CodeReviewForm, items: list[RequirementItem]
) -> CodeReviewForm:
    return form.model_copy(update={"requirements": [*form.requirements, *items]})


def append_prd_requirements(form: PRDForm, items: list[PRDRequirementItem]) -> PRDForm:
    return form.model_copy(update={"requirements": [*form.requirements, *items]})


def import_label(count: int) -> str:
    """Import button label, e.g. ``Import 3 requirements``."""
    if count == 0:
        return "Nothing selected"
    return f"Import {count} requirement{'s' if count != 1 else ''}"


def newest_first(
    documents: Iterable[CodeReviewDocument | PRDDocument],
) -> list[CodeReviewDocument | PRDDocument]:
    """Order import sources by last modification, most recent first."""
    return sorted(documents, key=lambda doc: doc.modified_at, reverse=True)
