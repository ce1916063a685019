"""Root conftest: shared test configuration."""

import os

# Ensure tests never reach the real external service or database
os.environ.setdefault("EXTERNAL_SERVICE_BASE_URL", "https://api.genderize.test")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
