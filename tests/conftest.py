"""Pytest configuration and shared fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from basebridge.api.routes import router
from basebridge.config import Settings


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings with test values."""
    return Settings(
        formula_strategy="hybrid",
        max_nesting_depth=64,
        max_formula_length=10000,
        log_level="DEBUG",
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
    )


@pytest.fixture
def sample_schema() -> dict:
    """A database property schema as returned by the note-database API."""
    return {
        "Name": {"id": "title", "name": "Name", "type": "title"},
        "Price": {"id": "p%3Ar", "name": "Price", "type": "number"},
        "Quantity": {"id": "qty1", "name": "Quantity", "type": "number"},
        "Due Date": {"id": "due%40", "name": "Due Date", "type": "date"},
        "Tasks": {
            "id": "tsk9",
            "name": "Tasks",
            "type": "relation",
            "relation": {"database_id": "db-123", "type": "dual_property"},
        },
        "Total": {
            "id": "tot1",
            "name": "Total",
            "type": "formula",
            "formula": {
                "expression": "{{source:block_property:p%3Ar:00000000-0000:ab}} * "
                "{{source:block_property:qty1:00000000-0000:ab}}"
            },
        },
        "Root": {
            "id": "rt1",
            "name": "Root",
            "type": "formula",
            "formula": {"expression": 'sqrt(prop("Price"))'},
        },
        "Task Count": {
            "id": "tc1",
            "name": "Task Count",
            "type": "rollup",
            "rollup": {
                "relation_property_name": "Tasks",
                "relation_property_id": "tsk9",
                "rollup_property_name": "Status",
                "rollup_property_id": "st1",
                "function": "count",
            },
        },
        "Median Score": {
            "id": "ms1",
            "name": "Median Score",
            "type": "rollup",
            "rollup": {
                "relation_property_name": "Tasks",
                "rollup_property_name": "Score",
                "function": "median",
            },
        },
        "Archive": {"id": "btn1", "name": "Archive", "type": "button"},
    }


@pytest.fixture
def test_client() -> TestClient:
    """Create a test client on a bare app with the API router."""
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return TestClient(app)
