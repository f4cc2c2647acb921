"""Code Review form models."""

from typing import Any

from pydantic import Field, model_validator

from pmtools.models.common import (
    CamelModel,
    GapStatus,
    RecommendationStatus,
    RequirementStatus,
    new_id,
)


class RequirementItem(CamelModel):
    """Requirement coverage line."""

    id: str = Field(default_factory=new_id)
    status: RequirementStatus = RequirementStatus.INCOMPLETE
    description: str = ""


class GapItem(CamelModel):
    """Identified gap.

    ``note`` is only kept while RESOLVED and ``reason`` only while WONT_DO,
    so the two are never meaningful at the same time.
    """

    id: str = Field(default_factory=new_id)
    description: str = ""
    status: GapStatus = GapStatus.OPEN
    note: str | None = None
    reason: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy_resolved(cls, data: Any) -> Any:
        # Older stores recorded a boolean ``resolved`` instead of a status
        if isinstance(data, dict) and "status" not in data and "resolved" in data:
            data = dict(data)
            data["status"] = GapStatus.RESOLVED if data.pop("resolved") else GapStatus.OPEN
        return data

    @model_validator(mode="after")
    def _drop_mismatched_annotations(self) -> "GapItem":
        if self.status is not GapStatus.RESOLVED:
            self.note = None
        if self.status is not GapStatus.WONT_DO:
            self.reason = None
        return self


class RecommendationItem(CamelModel):
    """Recommended follow-up action. ``reason`` is only kept while WONT_FIX."""

    id: str = Field(default_factory=new_id)
    description: str = ""
    status: RecommendationStatus = RecommendationStatus.OPEN
    reason: str | None = None

    @model_validator(mode="after")
    def _drop_mismatched_reason(self) -> "RecommendationItem":
        if self.status is not RecommendationStatus.WONT_FIX:
            self.reason = None
        return self


class OutOfScopeItem(CamelModel):
    """Follow-up item explicitly left out of this review."""

    id: str = Field(default_factory=new_id)
    title: str = ""
    acceptance_criteria: str = ""


class CodeReviewForm(CamelModel):
    """Editable state of a Code Review document."""

    title: str = ""
    author: str | None = None
    author_role: str | None = None
    related_prd: str | None = Field(None, alias="relatedPRD")
    related_issue: str | None = None
    requirements: list[RequirementItem] = Field(default_factory=list)
    gaps: list[GapItem] = Field(default_factory=list)
    recommendations: list[RecommendationItem] = Field(default_factory=list)
    out_of_scope: list[OutOfScopeItem] = Field(default_factory=list)


def set_gap_status(gap: GapItem, status: GapStatus, text: str | None = None) -> GapItem:
    """Return a copy of ``gap`` moved to ``status``.

    ``text`` becomes the resolution note (RESOLVED) or the reason (WONT_DO)
    and is discarded for OPEN.
    """
    return GapItem(
        id=gap.id,
        description=gap.description,
        status=status,
        note=text if status is GapStatus.RESOLVED else None,
        reason=text if status is GapStatus.WONT_DO else None,
    )


def set_recommendation_status(
    rec: RecommendationItem, status: RecommendationStatus, reason: str | None = None
) -> RecommendationItem:
    """Return a copy of ``rec`` moved to ``status``."""
    return RecommendationItem(
        id=rec.id,
        description=rec.description,
        status=status,
        reason=reason if status is RecommendationStatus.WONT_FIX else None,
    )
