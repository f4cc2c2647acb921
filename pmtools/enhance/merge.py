"""Build accepted-changes records and merge them into a form.

The merge is a pure function of (form, accepted changes): every targeted
field is replaced outright with its final text, never appended to, so
applying the same record to the same base form always gives the same
result and never stacks TODO suffixes.
"""

import re
from collections.abc import Callable

from pmtools.enhance.selection import (
    PRD_LIST_FIELDS,
    REVIEW_LIST_FIELDS,
    Reconciliation,
    Suggestion,
)
from pmtools.models.common import GapStatus, new_id
from pmtools.models.enhancement import AcceptedChanges, PRDAcceptedChanges
from pmtools.models.prd import PRD_SECTION_KEYS, PRDForm
from pmtools.models.review import CodeReviewForm, GapItem

_SENTENCE_END = re.compile(r"[.!?]$")


def compose_todo(text: str, flags: list[str]) -> str:
    """Append checked flags as ``[TODO: a; b]``; no flags leaves text as-is."""
    if not flags:
        return text
    return f"{text} [TODO: {'; '.join(flags)}]"


def normalize_gap_text(note: str) -> str:
    """Turn a missing-coverage note into gap text.

    Trimmed, first letter capitalized, and closed with a period unless it
    already ends in sentence punctuation.
    """
    text = note.strip()
    if not text:
        return ""
    text = text[0].upper() + text[1:]
    if not _SENTENCE_END.search(text):
        text += "."
    return text


def final_text(reconciliation: Reconciliation, suggestion: Suggestion) -> str:
    return compose_todo(suggestion.improved, reconciliation.selected_flags(suggestion))


def review_accepted_changes(reconciliation: Reconciliation) -> AcceptedChanges:
    """Collect the user's Code Review selection into an accepted-changes record."""
    accepted = AcceptedChanges()
    for suggestion in reconciliation.checked_suggestions():
        target: dict[str, str] = getattr(accepted, suggestion.section)
        target[suggestion.key] = final_text(reconciliation, suggestion)
    accepted.new_gaps = reconciliation.checked_notes()
    return accepted


def prd_accepted_changes(reconciliation: Reconciliation) -> PRDAcceptedChanges:
    """Collect the user's PRD selection into an accepted-changes record."""
    accepted = PRDAcceptedChanges()
    for suggestion in reconciliation.checked_suggestions():
        target: dict[str, str] = getattr(accepted, suggestion.section)
        target[suggestion.key] = final_text(reconciliation, suggestion)
    return accepted


def _patch_list(items: list, text_field: str, replacements: dict[str, str]) -> list:
    # Ids with no source item are ignored
    return [
        item.model_copy(update={text_field: replacements[item.id]})
        if item.id in replacements
        else item
        for item in items
    ]


def apply_review_changes(
    form: CodeReviewForm,
    accepted: AcceptedChanges,
    id_factory: Callable[[], str] = new_id,
) -> CodeReviewForm:
    """Return a new Code Review form with ``accepted`` merged in.

    Each accepted missing-coverage note becomes a new OPEN gap, unless a gap
    with the same text already exists.
    """
    update: dict[str, list] = {}
    for section, text_field in REVIEW_LIST_FIELDS.items():
        replacements: dict[str, str] = getattr(accepted, section)
        if replacements:
            update[section] = _patch_list(getattr(form, section), text_field, replacements)

    gaps: list[GapItem] = update.get("gaps", list(form.gaps))
    existing = {gap.description for gap in gaps}
    added = False
    for note in accepted.new_gaps:
        description = normalize_gap_text(note)
        if not description or description in existing:
            continue
        gaps.append(GapItem(id=id_factory(), description=description, status=GapStatus.OPEN))
        existing.add(description)
        added = True
    if added:
        update["gaps"] = gaps

    return form.model_copy(update=update)


def apply_prd_changes(form: PRDForm, accepted: PRDAcceptedChanges) -> PRDForm:
    """Return a new PRD form with ``accepted`` merged in.

    Scalar sections are keyed by field name; ``missing_sections`` notes are
    never materialized.
    """
    update: dict[str, object] = {}
    for key in PRD_SECTION_KEYS:
        if key in accepted.sections:
            update[key] = accepted.sections[key]
    for section, text_field in PRD_LIST_FIELDS.items():
        replacements: dict[str, str] = getattr(accepted, section)
        if replacements:
            update[section] = _patch_list(getattr(form, section), text_field, replacements)
    return form.model_copy(update=update)
