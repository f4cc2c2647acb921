"""Enhancement suggestion models (transient, never persisted).

Model output is only guaranteed to be syntactically valid JSON, so every
model here is built defensively: absent keys become empty, lists that are
not lists become empty, entries that are not objects or carry no id are
dropped, and non-string flags are discarded.
"""

from typing import Any

from pydantic import Field, field_validator

from pmtools.models.common import CamelModel

FLAG_MARKER = "⚑"


def _clean_flags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    flags = []
    for flag in value:
        if not isinstance(flag, str):
            continue
        flag = flag.strip()
        if flag.startswith(FLAG_MARKER):
            flag = flag[len(FLAG_MARKER) :].strip()
        if flag:
            flags.append(flag)
    return flags


def _clean_items(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    items = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        item_id = entry.get("id")
        if isinstance(item_id, int | float) and not isinstance(item_id, bool):
            item_id = str(item_id)
        if not isinstance(item_id, str) or not item_id:
            continue
        items.append({**entry, "id": item_id})
    return items


def _clean_notes(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [note for note in value if isinstance(note, str) and note.strip()]


class SectionImprovement(CamelModel):
    """Suggested rewrite of one field plus short caveats ("flags").

    ``improved`` is None when the model omitted it; the reconciliation layer
    then treats the field as unchanged.
    """

    improved: str | None = None
    flags: list[str] = Field(default_factory=list)

    @field_validator("improved", mode="before")
    @classmethod
    def _coerce_improved(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("flags", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> list[str]:
        return _clean_flags(value)


class EnhancementItem(SectionImprovement):
    """Suggestion for one list item, joined to the source item by ``id``."""

    id: str


class EnhancementResult(CamelModel):
    """Parsed suggestions for a Code Review."""

    requirements: list[EnhancementItem] = Field(default_factory=list)
    gaps: list[EnhancementItem] = Field(default_factory=list)
    recommendations: list[EnhancementItem] = Field(default_factory=list)
    missing_coverage: list[str] = Field(default_factory=list)

    @field_validator("requirements", "gaps", "recommendations", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> list[dict[str, Any]]:
        return _clean_items(value)

    @field_validator("missing_coverage", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> list[str]:
        return _clean_notes(value)

    @classmethod
    def from_raw(cls, raw: Any) -> "EnhancementResult":
        """Build from parsed JSON of any shape."""
        return cls.model_validate(raw if isinstance(raw, dict) else {})


class PRDSections(CamelModel):
    """Scalar-field suggestions, each optional."""

    overview: SectionImprovement | None = None
    problem_statement: SectionImprovement | None = None
    objective: SectionImprovement | None = None
    notes: SectionImprovement | None = None

    @field_validator("overview", "problem_statement", "objective", "notes", mode="before")
    @classmethod
    def _coerce_section(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    def items(self) -> list[tuple[str, SectionImprovement]]:
        """Present sections in prompt order, keyed by form attribute name."""
        present = []
        for key in ("overview", "problem_statement", "objective", "notes"):
            section = getattr(self, key)
            if section is not None:
                present.append((key, section))
        return present


class PRDEnhancementResult(CamelModel):
    """Parsed suggestions for a PRD."""

    sections: PRDSections = Field(default_factory=PRDSections)
    success_metrics: list[EnhancementItem] = Field(default_factory=list)
    requirements: list[EnhancementItem] = Field(default_factory=list)
    out_of_scope: list[EnhancementItem] = Field(default_factory=list)
    open_questions: list[EnhancementItem] = Field(default_factory=list)
    scenarios: list[EnhancementItem] = Field(default_factory=list)
    missing_sections: list[str] = Field(default_factory=list)

    @field_validator("sections", mode="before")
    @classmethod
    def _coerce_sections(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator(
        "success_metrics",
        "requirements",
        "out_of_scope",
        "open_questions",
        "scenarios",
        mode="before",
    )
    @classmethod
    def _coerce_items(cls, value: Any) -> list[dict[str, Any]]:
        return _clean_items(value)

    @field_validator("missing_sections", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> list[str]:
        return _clean_notes(value)

    @classmethod
    def from_raw(cls, raw: Any) -> "PRDEnhancementResult":
        """Build from parsed JSON of any shape."""
        return cls.model_validate(raw if isinstance(raw, dict) else {})


class AcceptedChanges(CamelModel):
    """Final text per accepted Code Review item, plus notes to add as gaps."""

    requirements: dict[str, str] = Field(default_factory=dict)
    gaps: dict[str, str] = Field(default_factory=dict)
    recommendations: dict[str, str] = Field(default_factory=dict)
    new_gaps: list[str] = Field(default_factory=list)


class PRDAcceptedChanges(CamelModel):
    """Final text per accepted PRD section or list item.

    ``sections`` is keyed by form attribute name (``problem_statement``).
    """

    sections: dict[str, str] = Field(default_factory=dict)
    success_metrics: dict[str, str] = Field(default_factory=dict)
    requirements: dict[str, str] = Field(default_factory=dict)
    out_of_scope: dict[str, str] = Field(default_factory=dict)
    open_questions: dict[str, str] = Field(default_factory=dict)
    scenarios: dict[str, str] = Field(default_factory=dict)
