"""Markdown export of Code Reviews and PRDs."""

from datetime import datetime

from pmtools.models.common import GapStatus, RecommendationStatus
from pmtools.models.prd import PRDForm
from pmtools.models.review import CodeReviewForm


def format_date(value: datetime | None) -> str:
    """Short human date, e.g. ``5 Mar 2025``."""
    if value is None:
        return ""
    return f"{value.day} {value.strftime('%b')} {value.year}"


def _review_meta(form: CodeReviewForm, created_at: datetime | None) -> list[tuple[str, str]]:
    rows = [
        ("Author", form.author or ""),
        ("Role", form.author_role or ""),
        ("Related PRD", form.related_prd or ""),
        ("Issue", form.related_issue or ""),
        ("Date", format_date(created_at)),
    ]
    return [(label, value) for label, value in rows if value]


def generate_review_markdown(form: CodeReviewForm, created_at: datetime | None = None) -> str:
    """Render a Code Review as Markdown.

    Gaps and recommendations render by status: checkboxes for open/done,
    strikethrough with an optional reason for won't-do/won't-fix.
    """
    lines: list[str] = [f"# PM Review [{form.title or 'Untitled'}]", ""]

    meta = _review_meta(form, created_at)
    if meta:
        for label, value in meta:
            lines.append(f"**{label}:** {value}  ")
        lines.append("")

    lines.append("## Requirements Coverage")
    if not form.requirements:
        lines.append("_No requirements added._")
    for req in form.requirements:
        lines.append(f"- {req.status.value} — {req.description}")
    lines.append("")

    lines.append("## Gaps Identified")
    if not form.gaps:
        lines.append("_No gaps identified._")
    for gap in form.gaps:
        if gap.status is GapStatus.RESOLVED:
            suffix = f" *({gap.note})*" if gap.note else ""
            lines.append(f"- [x] {gap.description}{suffix}")
        elif gap.status is GapStatus.WONT_DO:
            suffix = f" — {gap.reason}" if gap.reason else ""
            lines.append(f"- ~~{gap.description}~~ *(Won't Do{suffix})*")
        else:
            lines.append(f"- [ ] {gap.description}")
    lines.append("")

    lines.append("## Recommendations")
    if not form.recommendations:
        lines.append("_No recommendations._")
    for rec in form.recommendations:
        if rec.status is RecommendationStatus.DONE:
            lines.append(f"- [x] {rec.description}")
        elif rec.status is RecommendationStatus.WONT_FIX:
            suffix = f" — {rec.reason}" if rec.reason else ""
            lines.append(f"- ~~{rec.description}~~ *(Won't Fix{suffix})*")
        else:
            lines.append(f"- [ ] {rec.description}")
    lines.append("")

    lines.append("## Out of Scope / Follow-up")
    if not form.out_of_scope:
        lines.append("_No out of scope items._")
    for item in form.out_of_scope:
        lines.extend([f"### {item.title}", "**Acceptance Criteria:**", item.acceptance_criteria, ""])

    return "\n".join(lines)


def _prd_meta(
    form: PRDForm, created_at: datetime | None, modified_at: datetime | None
) -> list[tuple[str, str]]:
    meta = form.meta
    rows = [
        ("Product Manager", meta.author),
        ("Status", meta.status.value),
        ("Created", format_date(created_at)),
        ("Last Updated", format_date(modified_at)),
        ("Version", meta.version),
        ("Product Area", meta.product_area),
        ("Dev Lead", meta.engineering_lead),
        ("Design Lead", meta.design_lead),
        ("PMM", meta.pmm),
        ("Target Launch", meta.target_launch),
        ("Key Stakeholders", meta.stakeholders),
        ("Doc Link", meta.doc_link),
    ]
    return [(label, value) for label, value in rows if value]


def _bullets(lines: list[str], values: list[str], empty: str) -> None:
    if not values:
        lines.append(empty)
    lines.extend(f"- {value}" for value in values)
    lines.append("")


def generate_prd_markdown(
    form: PRDForm,
    created_at: datetime | None = None,
    modified_at: datetime | None = None,
) -> str:
    """Render a PRD as Markdown.

    The timeline table only gets a Dependencies column when at least one
    phase lists dependencies.
    """
    not_completed = "_Not completed._"
    lines: list[str] = [f"# PRD [{form.title or 'Untitled PRD'}]", ""]

    meta = _prd_meta(form, created_at, modified_at)
    if meta:
        lines.extend(["| Field | Value |", "|-------|-------|"])
        lines.extend(f"| {label} | {value} |" for label, value in meta)
        lines.append("")

    lines.extend(["## Overview", form.overview or not_completed, ""])
    lines.extend(["## Problem Statement", form.problem_statement or not_completed, ""])

    lines.extend(["## Goals", "**Primary Objective**", form.objective or not_completed, ""])
    lines.append("**Success Metrics**")
    _bullets(lines, [m.metric for m in form.success_metrics], "_No success metrics added._")

    lines.append("## How This Works")
    if not form.scenarios:
        lines.append("_No scenarios added._")
    for scenario in form.scenarios:
        lines.extend([f"### {scenario.title or 'Scenario'}", scenario.content or not_completed, ""])

    lines.append("## Requirements")
    _bullets(lines, [r.description for r in form.requirements], "_No requirements added._")

    lines.append("## Out of Scope")
    _bullets(lines, [o.description for o in form.out_of_scope], "_No out of scope items added._")

    lines.append("## Timeline")
    if not form.timeline:
        lines.append("_No timeline added._")
    elif any(phase.dependencies for phase in form.timeline):
        lines.append("| Phase | Dates | What Ships | Dependencies |")
        lines.append("|-------|-------|------------|--------------|")
        for phase in form.timeline:
            lines.append(
                f"| {phase.name} | {phase.dates} | {phase.deliverables} | {phase.dependencies} |"
            )
    else:
        lines.append("| Phase | Dates | What Ships |")
        lines.append("|-------|-------|------------|")
        for phase in form.timeline:
            lines.append(f"| {phase.name} | {phase.dates} | {phase.deliverables} |")
    lines.append("")

    lines.append("## Open Questions")
    _bullets(lines, [q.question for q in form.open_questions], "_No open questions added._")

    lines.extend(["## Notes", form.notes or "_No notes added._"])
    return "\n".join(lines)
