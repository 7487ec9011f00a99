"""Shared fixtures for API tests."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.catalog.registry import RepositoryRegistry
from app.main import app


@pytest.fixture
def client(registry: RepositoryRegistry) -> TestClient:
    """Test client backed by a fresh in-memory registry."""
    return TestClient(app)


@pytest.fixture
def create(client: TestClient):
    """POST a record and return its result payload."""

    def _create(entity: str, data: dict[str, Any]) -> dict[str, Any]:
        response = client.post(f"/{entity}", json=data)
        assert response.status_code == 201, response.text
        return response.json()["result"]

    return _create


@pytest.fixture
def api_chain(create) -> dict[str, dict[str, Any]]:
    """One node per level created through the API."""
    series = create("series", {"code": "AAA", "name": {"TW": "系列", "EN": "Series"}})
    category = create("categories", {"code": "C1", "series_id": series["id"]})
    sub_category = create("sub_categories", {"code": "SC1", "category_id": category["id"]})
    specification = create(
        "specifications", {"code": "SP1", "sub_category_id": sub_category["id"]}
    )
    product = create(
        "products",
        {
            "code": "P1",
            "name": {"EN": "Pump"},
            "description": {"EN": "Centrifugal"},
            "specification_id": specification["id"],
        },
    )
    return {
        "series": series,
        "categories": category,
        "sub_categories": sub_category,
        "specifications": specification,
        "products": product,
    }
