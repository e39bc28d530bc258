"""Tests for the FastAPI endpoints.

Repositories, Redis and the random source are swapped through
dependency_overrides, so no Mongo or Redis server is needed.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from bookreco.api.deps import order_repo_dep, product_repo_dep, redis_dep, rng_dep
from bookreco.domain.repositories.product_repo import ProductRepo
from bookreco.main import app

from conftest import FakeOrderRepo, FakeProductRepo, FakeRedis, FixedIndices, make_item


@pytest.fixture
def catalog():
    return [
        make_item("A", "Fiction", 10, 5, age_days=4),
        make_item("B", "Fiction", 12, 4, age_days=3),
        make_item("C", "Fiction", 55, 1, age_days=2),
        make_item("D", "Romance", 8, 20, age_days=1),
    ]


@pytest.fixture
def client(catalog):
    redis = FakeRedis()
    app.dependency_overrides[product_repo_dep] = lambda: FakeProductRepo(catalog)
    app.dependency_overrides[order_repo_dep] = lambda: FakeOrderRepo()
    app.dependency_overrides[rng_dep] = lambda: FixedIndices([2, 3])
    app.dependency_overrides[redis_dep] = lambda: redis
    test_client = TestClient(app)
    test_client.redis = redis
    yield test_client
    app.dependency_overrides.clear()


def test_similar_products_endpoint(client):
    response = client.get("/products/A/similar?limit=2")

    assert response.status_code == 200
    data = response.json()
    assert data["source_product_id"] == "A"
    assert data["strategy"] == "cluster"
    assert data["count"] == 2
    assert [it["item"]["product_id"] for it in data["items"]] == ["B", "C"]
    assert data["items"][0]["cluster_info"]["source"] == "cluster"
    assert 0.0 <= data["items"][0]["similarity_score"] <= 1.0


def test_similar_products_default_limit(client):
    response = client.get("/products/A/similar")

    assert response.status_code == 200
    ids = [it["item"]["product_id"] for it in response.json()["items"]]
    assert len(ids) <= 6
    assert "A" not in ids


def test_similar_products_unknown_product(client):
    response = client.get("/products/nope/similar")

    assert response.status_code == 404
    assert "nope" in response.json()["detail"]


def test_similar_products_invalid_target_document(client):
    col = MagicMock()
    col.find_one = AsyncMock(return_value={"product_id": "t", "category": "Fiction", "price": 10, "stock": -1})
    app.dependency_overrides[product_repo_dep] = lambda: ProductRepo({"products": col})

    response = client.get("/products/t/similar?limit=2")

    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found: t"


@pytest.mark.parametrize("limit", [0, -1, 51])
def test_similar_products_rejects_bad_limit(client, limit):
    response = client.get(f"/products/A/similar?limit={limit}")
    assert response.status_code == 422


def test_refresh_stores_report(client):
    response = client.post("/products/clusters/refresh")

    assert response.status_code == 200
    data = response.json()
    assert data["items_processed"] == 4
    assert data["stored"] is True
    assert data["iterations"] <= 100
    # lock released after the run
    assert "lock:clusters:refresh" not in client.redis.store

    last = client.get("/products/clusters/last-refresh")
    assert last.status_code == 200
    assert last.json()["cluster_count"] == data["cluster_count"]


def test_refresh_conflict_when_locked(client):
    client.redis.store["lock:clusters:refresh"] = "someone-else"

    response = client.post("/products/clusters/refresh")

    assert response.status_code == 409
    assert client.redis.store["lock:clusters:refresh"] == "someone-else"


def test_refresh_without_redis(client):
    app.dependency_overrides[redis_dep] = lambda: None

    response = client.post("/products/clusters/refresh")
    assert response.status_code == 200
    assert response.json()["stored"] is False

    assert client.get("/products/clusters/last-refresh").status_code == 404


def test_last_refresh_missing(client):
    response = client.get("/products/clusters/last-refresh")
    assert response.status_code == 404
