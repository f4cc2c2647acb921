"""Tests for cross-document requirement import."""

from datetime import datetime, timezone

from pmtools.enhance.importing import (
    append_review_requirements,
    import_label,
    newest_first,
    requirements_from_prd,
    requirements_from_review,
)
from pmtools.models.common import RequirementStatus
from pmtools.models.document import PRDDocument
from pmtools.models.prd import PRDForm, PRDRequirementItem
from pmtools.models.review import CodeReviewForm


def test_prd_requirements_become_incomplete_review_requirements(prd_form: PRDForm) -> None:
    items = requirements_from_prd(prd_form, id_factory=lambda: "fresh")

    assert len(items) == 1
    assert items[0].id == "fresh"
    assert items[0].status is RequirementStatus.INCOMPLETE
    assert items[0].description == "search box"


def test_only_selected_ids_are_imported(prd_form: PRDForm) -> None:
    form = prd_form.model_copy(
        update={
            "requirements": [
                PRDRequirementItem(id="p1", description="search box"),
                PRDRequirementItem(id="p2", description="filters"),
            ]
        }
    )

    items = requirements_from_prd(form, ids=["p2"])

    assert [item.description for item in items] == ["filters"]
    assert items[0].id != "p2"


def test_review_requirements_keep_link_to_source(review_form: CodeReviewForm) -> None:
    items = requirements_from_review(review_form, source_review_id="rev-1")

    assert [item.description for item in items] == [
        "enhance with ai button",
        "The API key is validated.",
    ]
    assert all(item.source_review_id == "rev-1" for item in items)
    assert {item.id for item in items}.isdisjoint({"r1", "r2"})


def test_imported_requirements_are_appended(review_form: CodeReviewForm, prd_form: PRDForm) -> None:
    merged = append_review_requirements(review_form, requirements_from_prd(prd_form))

    assert [r.id for r in merged.requirements[:2]] == ["r1", "r2"]
    assert merged.requirements[2].description == "search box"
    assert len(review_form.requirements) == 2


def test_import_label() -> None:
    assert import_label(0) == "Nothing selected"
    assert import_label(1) == "Import 1 requirement"
    assert import_label(3) == "Import 3 requirements"


def test_newest_first() -> None:
    older = PRDDocument(id="a", modified_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    newer = PRDDocument(id="b", modified_at=datetime(2025, 6, 1, tzinfo=timezone.utc))

    assert [doc.id for doc in newest_first([older, newer])] == ["b", "a"]
