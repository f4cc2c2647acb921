"""Export JSON schemas for stored documents and enhancement results."""

import json
from pathlib import Path

from pydantic import BaseModel

from pmtools.models import CodeReviewDocument, EnhancementResult, PRDDocument, PRDEnhancementResult

SCHEMA_MODELS: list[type[BaseModel]] = [
    CodeReviewDocument,
    PRDDocument,
    EnhancementResult,
    PRDEnhancementResult,
]


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in SCHEMA_MODELS:
        # Wire format uses camelCase aliases
        schema = model.model_json_schema(by_alias=True)
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
