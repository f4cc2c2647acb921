"""Tests for Markdown export."""

from datetime import datetime, timezone

from pmtools.export.markdown import format_date, generate_prd_markdown, generate_review_markdown
from pmtools.models.common import GapStatus, RecommendationStatus
from pmtools.models.prd import PRDForm, PRDMeta, PRDTimelinePhase
from pmtools.models.review import CodeReviewForm, GapItem, RecommendationItem

CREATED = datetime(2025, 3, 5, 9, 30, tzinfo=timezone.utc)


def test_format_date() -> None:
    assert format_date(CREATED) == "5 Mar 2025"
    assert format_date(None) == ""


def test_review_markdown_layout(review_form: CodeReviewForm) -> None:
    form = review_form.model_copy(update={"author": "Sam", "related_issue": "#42"})

    md = generate_review_markdown(form, CREATED)
    lines = md.splitlines()

    assert lines[0] == "# PM Review [AI enhancement]"
    assert "**Author:** Sam  " in lines
    assert "**Issue:** #42  " in lines
    assert "**Date:** 5 Mar 2025  " in lines
    # Empty metadata rows are left out
    assert not any(line.startswith("**Role:**") for line in lines)
    assert "- INCOMPLETE — enhance with ai button" in lines
    assert "- [ ] error handling" in lines
    assert "- [ ] add rate limiting" in lines
    assert "### Streaming" in lines
    assert "**Acceptance Criteria:**" in lines


def test_review_markdown_renders_statuses() -> None:
    form = CodeReviewForm(
        gaps=[
            GapItem(description="Rate limiting", status=GapStatus.RESOLVED, note="added in #3"),
            GapItem(description="Telemetry", status=GapStatus.WONT_DO, reason="later"),
            GapItem(description="Docs", status=GapStatus.WONT_DO),
        ],
        recommendations=[
            RecommendationItem(description="Add retries", status=RecommendationStatus.DONE),
            RecommendationItem(
                description="Cache", status=RecommendationStatus.WONT_FIX, reason="cost"
            ),
        ],
    )

    lines = generate_review_markdown(form).splitlines()

    assert lines[0] == "# PM Review [Untitled]"
    assert "- [x] Rate limiting *(added in #3)*" in lines
    assert "- ~~Telemetry~~ *(Won't Do — later)*" in lines
    assert "- ~~Docs~~ *(Won't Do)*" in lines
    assert "- [x] Add retries" in lines
    assert "- ~~Cache~~ *(Won't Fix — cost)*" in lines
    assert "_No requirements added._" in lines
    assert "_No out of scope items._" in lines


def test_prd_markdown_layout(prd_form: PRDForm) -> None:
    form = prd_form.model_copy(update={"meta": PRDMeta(author="Alex", version="1.2")})

    md = generate_prd_markdown(form, CREATED, CREATED)
    lines = md.splitlines()

    assert lines[0] == "# PRD [Smart Search]"
    assert "| Product Manager | Alex |" in lines
    assert "| Status | Draft |" in lines
    assert "| Created | 5 Mar 2025 |" in lines
    assert "| Last Updated | 5 Mar 2025 |" in lines
    assert "| Version | 1.2 |" in lines
    assert "_Not completed._" in lines  # empty objective
    assert "- faster search" in lines
    assert "### Happy Path" in lines
    assert "| Phase | Dates | What Ships |" in lines
    assert "| Phase 1 | Q1 | MVP |" in lines
    assert "- which index?" in lines
    assert lines[-1] == "_No notes added._"


def test_prd_timeline_gets_dependencies_column_when_any_phase_has_one() -> None:
    form = PRDForm(
        timeline=[
            PRDTimelinePhase(name="Phase 1", dates="Q1", deliverables="MVP"),
            PRDTimelinePhase(name="Phase 2", dates="Q2", deliverables="GA", dependencies="Infra"),
        ]
    )

    lines = generate_prd_markdown(form).splitlines()

    assert "| Phase | Dates | What Ships | Dependencies |" in lines
    assert "| Phase 1 | Q1 | MVP |  |" in lines
    assert "| Phase 2 | Q2 | GA | Infra |" in lines


def test_empty_prd_placeholders() -> None:
    form = PRDForm(title="", scenarios=[], timeline=[])

    lines = generate_prd_markdown(form).splitlines()

    assert lines[0] == "# PRD [Untitled PRD]"
    assert "_No success metrics added._" in lines
    assert "_No scenarios added._" in lines
    assert "_No out of scope items added._" in lines
    assert "_No timeline added._" in lines
    assert "_No open questions added._" in lines
