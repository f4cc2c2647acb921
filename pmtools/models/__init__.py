"""Models package - re-exports for convenience."""

from pmtools.models.common import (
    DocumentKind,
    GapStatus,
    PRDStatus,
    RecommendationStatus,
    RequirementStatus,
    new_id,
    utc_now,
)
from pmtools.models.document import (
    DEFAULT_TITLES,
    DOCUMENT_MODELS,
    CodeReviewDocument,
    Document,
    PRDDocument,
    document_adapter,
)
from pmtools.models.enhancement import (
    AcceptedChanges,
    EnhancementItem,
    EnhancementResult,
    PRDAcceptedChanges,
    PRDEnhancementResult,
    PRDSections,
    SectionImprovement,
)
from pmtools.models.prd import (
    PRD_SECTION_KEYS,
    PRDForm,
    PRDMeta,
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

__all__ = [
    # Common
    "DocumentKind",
    "GapStatus",
    "PRDStatus",
    "RecommendationStatus",
    "RequirementStatus",
    "new_id",
    "utc_now",
    # Documents
    "DEFAULT_TITLES",
    "DOCUMENT_MODELS",
    "CodeReviewDocument",
    "Document",
    "PRDDocument",
    "document_adapter",
    # Enhancement
    "AcceptedChanges",
    "EnhancementItem",
    "EnhancementResult",
    "PRDAcceptedChanges",
    "PRDEnhancementResult",
    "PRDSections",
    "SectionImprovement",
    # PRD
    "PRD_SECTION_KEYS",
    "PRDForm",
    "PRDMeta",
    "PRDOpenQuestion",
    "PRDOutOfScopeItem",
    "PRDRequirementItem",
    "PRDScenario",
    "PRDSuccessMetric",
    "PRDTimelinePhase",
    # Code review
    "CodeReviewForm",
    "GapItem",
    "OutOfScopeItem",
    "RecommendationItem",
    "RequirementItem",
]
