"""Integration tests need a migrated PostgreSQL database.

Run them with INTEGRATION_TESTS=1 and DATABASE__URL pointing at the
database, after ``alembic upgrade head``.
"""

import os

import pytest


def pytest_collection_modifyitems(config, items):
    if os.environ.get("INTEGRATION_TESTS") == "1":
        return
    skip = pytest.mark.skip(reason="set INTEGRATION_TESTS=1 to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
