"""PRD (Product Requirements Document) form models."""

from typing import Any

from pydantic import Field, model_validator

from pmtools.models.common import CamelModel, PRDStatus, new_id

# Scalar text fields that an enhancement may rewrite, in prompt order
PRD_SECTION_KEYS: tuple[str, ...] = ("overview", "problem_statement", "objective", "notes")


class PRDMeta(CamelModel):
    """Header metadata table of a PRD."""

    author: str = ""
    status: PRDStatus = PRDStatus.draft
    version: str = ""
    product_area: str = ""
    engineering_lead: str = ""
    design_lead: str = ""
    pmm: str = ""
    stakeholders: str = ""
    target_launch: str = ""
    doc_link: str = ""


class PRDSuccessMetric(CamelModel):
    id: str = Field(default_factory=new_id)
    metric: str = ""


class PRDScenario(CamelModel):
    id: str = Field(default_factory=new_id)
    title: str = ""
    content: str = ""


class PRDRequirementItem(CamelModel):
    id: str = Field(default_factory=new_id)
    description: str = ""
    # Set when the requirement was imported from a code review
    source_review_id: str | None = None


class PRDOutOfScopeItem(CamelModel):
    id: str = Field(default_factory=new_id)
    description: str = ""


class PRDTimelinePhase(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    dates: str = ""
    deliverables: str = ""
    dependencies: str = ""


class PRDOpenQuestion(CamelModel):
    id: str = Field(default_factory=new_id)
    question: str = ""


def default_scenarios() -> list[PRDScenario]:
    """Scenario placeholders every new PRD starts with."""
    return [
        PRDScenario(title="Happy Path"),
        PRDScenario(title="Alternative Scenario"),
        PRDScenario(title="Error State"),
    ]


def default_timeline() -> list[PRDTimelinePhase]:
    """Timeline placeholders every new PRD starts with."""
    return [PRDTimelinePhase(name="Phase 1"), PRDTimelinePhase(name="Phase 2")]


class PRDForm(CamelModel):
    """Editable state of a PRD document.

    Stored documents written by older versions may lack fields; missing
    fields are hydrated from the new-document defaults and ``meta`` is
    merged over an empty meta.
    """

    title: str = ""
    meta: PRDMeta = Field(default_factory=PRDMeta)
    overview: str = ""
    problem_statement: str = ""
    objective: str = ""
    success_metrics: list[PRDSuccessMetric] = Field(default_factory=list)
    scenarios: list[PRDScenario] = Field(default_factory=default_scenarios)
    requirements: list[PRDRequirementItem] = Field(default_factory=list)
    out_of_scope: list[PRDOutOfScopeItem] = Field(default_factory=list)
    timeline: list[PRDTimelinePhase] = Field(default_factory=default_timeline)
    open_questions: list[PRDOpenQuestion] = Field(default_factory=list)
    notes: str = ""

    @model_validator(mode="before")
    @classmethod
    def _tolerate_null_meta(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("meta") is None and "meta" in data:
            data = {k: v for k, v in data.items() if k != "meta"}
        return data
