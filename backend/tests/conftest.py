"""Root conftest — shared test configuration."""

import os

# Settings are read at import time by chainmgr.main; never point tests at a real DB
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("NODES_ROOT", "./test-NODES_ROOT")
