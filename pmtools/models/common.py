"""Common types and enums shared across all models."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def new_id() -> str:
    """Generate a fresh item/document id (never reused)."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class DocumentKind(str, Enum):
    """Document type discriminator, as stored in ``Document.type``."""

    code_review = "code-review"
    prd = "prd"

    @property
    def collection(self) -> str:
        """Name of the backing collection (file stem and URL segment)."""
        return "reviews" if self is DocumentKind.code_review else "prds"

    @property
    def label(self) -> str:
        """Human-readable singular label."""
        return "review" if self is DocumentKind.code_review else "PRD"


class RequirementStatus(str, Enum):
    """Coverage status of a code-review requirement."""

    VERIFIED = "VERIFIED"
    INCOMPLETE = "INCOMPLETE"
    MISSING = "MISSING"


class GapStatus(str, Enum):
    """Lifecycle status of an identified gap."""

    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
    WONT_DO = "WONT_DO"


class RecommendationStatus(str, Enum):
    """Lifecycle status of a recommendation."""

    OPEN = "OPEN"
    DONE = "DONE"
    WONT_FIX = "WONT_FIX"


class PRDStatus(str, Enum):
    """Approval status of a PRD."""

    draft = "Draft"
    in_review = "In Review"
    approved = "Approved"
