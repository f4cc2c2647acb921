"""Shared pytest fixtures for all test suites."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from pmtools.api.deps import get_repository
from pmtools.main import app
from pmtools.models.common import GapStatus, RecommendationStatus, RequirementStatus
from pmtools.models.prd import (
    PRDForm,
    PRDOpenQuestion,
    PRDOutOfScopeItem,
    PRDRequirementItem,
    PRDScenario,
    PRDSuccessMetric,
    PRDTimelinePhase,
)
from pmtools.models.review import (
    CodeReviewForm,
    GapItem,
    OutOfScopeItem,
    RecommendationItem,
    RequirementItem,
)
from pmtools.store.inmemory import InMemoryDocumentRepository


@pytest.fixture
def review_form() -> CodeReviewForm:
    """Code Review with one item of every kind and fixed ids."""
    return CodeReviewForm(
        title="AI enhancement",
        requirements=[
            RequirementItem(
                id="r1", status=RequirementStatus.INCOMPLETE, description="enhance with ai button"
            ),
            RequirementItem(
                id="r2",
                status=RequirementStatus.VERIFIED,
                description="The API key is validated.",
            ),
        ],
        gaps=[GapItem(id="g1", description="error handling", status=GapStatus.OPEN)],
        recommendations=[
            RecommendationItem(
                id="c1", description="add rate limiting", status=RecommendationStatus.OPEN
            )
        ],
        out_of_scope=[
            OutOfScopeItem(id="o1", title="Streaming", acceptance_criteria="Tokens stream in.")
        ],
    )


@pytest.fixture
def prd_form() -> PRDForm:
    """PRD with every section filled and fixed ids."""
    return PRDForm(
        title="Smart Search",
        overview="search thing",
        problem_statement="Users cannot find documents.",
        objective="",
        success_metrics=[PRDSuccessMetric(id="m1", metric="faster search")],
        scenarios=[PRDScenario(id="s1", title="Happy Path", content="user searches")],
        requirements=[PRDRequirementItem(id="p1", description="search box")],
        out_of_scope=[PRDOutOfScopeItem(id="x1", description="voice search")],
        timeline=[
            PRDTimelinePhase(id="t1", name="Phase 1", dates="Q1", deliverables="MVP"),
        ],
        open_questions=[PRDOpenQuestion(id="q1", question="which index?")],
        notes="",
    )


@pytest.fixture
def repo() -> InMemoryDocumentRepository:
    """Fresh in-memory document repository."""
    return InMemoryDocumentRepository()


@pytest.fixture
def client(repo: InMemoryDocumentRepository) -> Iterator[TestClient]:
    """Test client whose document routes use the in-memory repository."""
    app.dependency_overrides[get_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_repository, None)
