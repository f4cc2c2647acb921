"""Global pytest configuration."""

import os

# Never pick up a developer's real key or data directory in tests
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ.pop("ANTHROPIC_BASE_URL", None)
os.environ.setdefault("DATA_DIR", "local_data_test")
