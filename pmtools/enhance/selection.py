"""Default-selection policy and per-item/per-flag selection state.

Policy:
- an item or section suggestion is pre-checked iff its suggested text
  differs from the current source text (unknown ids compare against "")
- every flag starts unchecked; flags are strictly opt-in
- every missing-coverage note starts checked (opt-out)

The state object is rendering-agnostic: a UI reads ``suggestions`` and the
``is_*_checked`` accessors and calls the ``toggle_*`` methods.
"""

from dataclasses import dataclass, field

from pmtools.models.enhancement import EnhancementItem, EnhancementResult, PRDEnhancementResult
from pmtools.models.prd import PRDForm
from pmtools.models.review import CodeReviewForm

SECTIONS = "sections"

# List attribute -> editable text attribute of its items
REVIEW_LIST_FIELDS: dict[str, str] = {
    "requirements": "description",
    "gaps": "description",
    "recommendations": "description",
}

PRD_LIST_FIELDS: dict[str, str] = {
    "success_metrics": "metric",
    "scenarios": "content",
    "requirements": "description",
    "out_of_scope": "description",
    "open_questions": "question",
}

ItemKey = tuple[str, str]
FlagKey = tuple[str, str, int]


@dataclass(frozen=True)
class Suggestion:
    """One suggestion lined up against its source text.

    ``section`` is the form list attribute (or ``"sections"`` for scalar PRD
    fields) and ``key`` the item id (or field name).
    """

    section: str
    key: str
    original: str
    improved: str
    flags: tuple[str, ...] = ()
    matched: bool = True

    @property
    def item_key(self) -> ItemKey:
        return (self.section, self.key)

    @property
    def changed(self) -> bool:
        return self.improved != self.original

    @property
    def actionable(self) -> bool:
        """Worth showing as selectable: new text or at least one flag."""
        return self.changed or bool(self.flags)


def default_item_checked(improved: str, original: str) -> bool:
    """Pre-check a suggestion iff it changes the text."""
    return improved != original


def _suggestion(
    section: str, item: EnhancementItem, originals: dict[str, str]
) -> Suggestion:
    matched = item.id in originals
    original = originals.get(item.id, "")
    # An omitted "improved" means "no change" rather than "clear the field"
    improved = item.improved if item.improved is not None else original
    return Suggestion(
        section=section,
        key=item.id,
        original=original,
        improved=improved,
        flags=tuple(item.flags),
        matched=matched,
    )


def _list_suggestions(
    form: CodeReviewForm | PRDForm,
    section: str,
    text_field: str,
    items: list[EnhancementItem],
) -> list[Suggestion]:
    originals = {entry.id: getattr(entry, text_field) for entry in getattr(form, section)}
    seen: set[str] = set()
    suggestions = []
    for item in items:
        # First suggestion wins when the model repeats an id
        if item.id in seen:
            continue
        seen.add(item.id)
        suggestions.append(_suggestion(section, item, originals))
    return suggestions


@dataclass
class Reconciliation:
    """Selection state for one enhancement result.

    Lives exactly as long as the result it was built from: created by one
    enhancement round-trip and consumed by at most one apply.
    """

    suggestions: list[Suggestion]
    notes: list[str]
    notes_become_items: bool
    checked: dict[ItemKey, bool] = field(default_factory=dict)
    flag_checked: dict[FlagKey, bool] = field(default_factory=dict)
    note_checked: dict[int, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for s in self.suggestions:
            self.checked.setdefault(s.item_key, default_item_checked(s.improved, s.original))
            for i in range(len(s.flags)):
                self.flag_checked.setdefault((s.section, s.key, i), False)
        if self.notes_become_items:
            for i in range(len(self.notes)):
                self.note_checked.setdefault(i, True)

    # --- lookup ---

    def get(self, section: str, key: str) -> Suggestion | None:
        for s in self.suggestions:
            if s.section == section and s.key == key:
                return s
        return None

    def in_section(self, section: str) -> list[Suggestion]:
        return [s for s in self.suggestions if s.section == section]

    def is_checked(self, section: str, key: str) -> bool:
        return self.checked.get((section, key), False)

    def is_flag_checked(self, section: str, key: str, index: int) -> bool:
        return self.flag_checked.get((section, key, index), False)

    def is_note_checked(self, index: int) -> bool:
        return self.note_checked.get(index, False)

    # --- user overrides ---

    def set_checked(self, section: str, key: str, value: bool) -> None:
        suggestion = self.get(section, key)
        if suggestion is None or not suggestion.actionable:
            return
        self.checked[(section, key)] = value

    def toggle(self, section: str, key: str) -> None:
        self.set_checked(section, key, not self.is_checked(section, key))

    def set_flag(self, section: str, key: str, index: int, value: bool) -> None:
        if (section, key, index) not in self.flag_checked:
            return
        self.flag_checked[(section, key, index)] = value

    def toggle_flag(self, section: str, key: str, index: int) -> None:
        self.set_flag(section, key, index, not self.is_flag_checked(section, key, index))

    def set_note(self, index: int, value: bool) -> None:
        if index not in self.note_checked:
            return
        self.note_checked[index] = value

    def toggle_note(self, index: int) -> None:
        self.set_note(index, not self.is_note_checked(index))

    # --- derived ---

    def selected_flags(self, suggestion: Suggestion) -> list[str]:
        """Checked flags of a suggestion, in their original order."""
        return [
            flag
            for i, flag in enumerate(suggestion.flags)
            if self.is_flag_checked(suggestion.section, suggestion.key, i)
        ]

    def checked_suggestions(self) -> list[Suggestion]:
        return [s for s in self.suggestions if self.is_checked(s.section, s.key)]

    def checked_notes(self) -> list[str]:
        return [note for i, note in enumerate(self.notes) if self.is_note_checked(i)]

    @property
    def has_any_actionable(self) -> bool:
        return any(s.actionable for s in self.suggestions) or bool(self.notes)

    @property
    def selected_count(self) -> int:
        return sum(1 for value in self.checked.values() if value)

    @property
    def selected_note_count(self) -> int:
        return sum(1 for value in self.note_checked.values() if value)

    def apply_label(self) -> str:
        """Button label, e.g. ``Apply 2 improvements + 1 gap``."""
        parts = []
        if self.selected_count:
            plural = "s" if self.selected_count != 1 else ""
            parts.append(f"{self.selected_count} improvement{plural}")
        if self.selected_note_count:
            plural = "s" if self.selected_note_count != 1 else ""
            parts.append(f"{self.selected_note_count} gap{plural}")
        return f"Apply {' + '.join(parts)}" if parts else "Nothing selected"


def review_reconciliation(result: EnhancementResult, form: CodeReviewForm) -> Reconciliation:
    """Line up Code Review suggestions against the form with default selection."""
    suggestions: list[Suggestion] = []
    for section, text_field in REVIEW_LIST_FIELDS.items():
        suggestions.extend(_list_suggestions(form, section, text_field, getattr(result, section)))
    return Reconciliation(
        suggestions=suggestions,
        notes=list(result.missing_coverage),
        notes_become_items=True,
    )


def prd_reconciliation(result: PRDEnhancementResult, form: PRDForm) -> Reconciliation:
    """Line up PRD suggestions against the form with default selection.

    ``missing_sections`` notes are display-only and are never selectable.
    """
    suggestions: list[Suggestion] = []
    for key, section in result.sections.items():
        original = getattr(form, key)
        improved = section.improved if section.improved is not None else original
        suggestions.append(
            Suggestion(
                section=SECTIONS,
                key=key,
                original=original,
                improved=improved,
                flags=tuple(section.flags),
            )
        )
    for section, text_field in PRD_LIST_FIELDS.items():
        suggestions.extend(_list_suggestions(form, section, text_field, getattr(result, section)))
    return Reconciliation(
        suggestions=suggestions,
        notes=list(result.missing_sections),
        notes_become_items=False,
    )
