"""Shared fixtures and in-memory collaborators for the bookreco tests."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import numpy as np
import pytest

from bookreco.domain.models.product import CatalogItem

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_item(product_id: str, category: Optional[str], price: float, stock: int, age_days: int = 0) -> CatalogItem:
    """Catalog item; larger age_days means catalogued earlier."""
    return CatalogItem(
        product_id=product_id,
        name=f"Book {product_id}",
        category=category,
        price=price,
        stock=stock,
        created_at=BASE_TIME - timedelta(days=age_days),
    )


class FakeProductRepo:
    """In-memory stand-in for ProductRepo (same method signatures)."""

    def __init__(self, items: List[CatalogItem]):
        self.items = list(items)
        self.category_queries = []

    async def get_by_product_id(self, product_id: str) -> Optional[CatalogItem]:
        return next((i for i in self.items if i.product_id == product_id), None)

    async def list_all(self, exclude_product_id: Optional[str] = None) -> List[CatalogItem]:
        return [i for i in self.items if i.product_id != exclude_product_id]

    async def find_by_category(self, category, *, exclude_product_id=None, limit=10):
        self.category_queries.append((category, exclude_product_id, limit))
        matches = [
            i for i in self.items
            if i.category == category and i.product_id != exclude_product_id
        ]
        matches.sort(key=lambda i: i.created_at, reverse=True)
        return matches[:limit]


class FakeOrderRepo:
    """In-memory stand-in for OrderRepo; counts calls, can be told to fail."""

    def __init__(self, popularity: Optional[Dict[str, float]] = None, error: Optional[Exception] = None):
        self.popularity = popularity or {}
        self.error = error
        self.calls = 0

    async def get_popularity(self) -> Dict[str, float]:
        self.calls += 1
        if self.error:
            raise self.error
        return dict(self.popularity)


class FakeRedis:
    """Dict-backed subset of redis.asyncio.Redis used by the lock and report store."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.store:
            return None
        self.store[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


class FixedIndices:
    """Generator stand-in: integers() returns the given indices (explicit centroid seeding), cycling if short."""

    def __init__(self, indices: List[int]):
        self.indices = list(indices)

    def integers(self, low, high=None, size=None):
        return np.array([self.indices[i % len(self.indices)] for i in range(size)])


@pytest.fixture
def abcd_catalog():
    """A/B/C Fiction with different price/stock profiles, D Romance."""
    return [
        make_item("A", "Fiction", 10, 5, age_days=4),
        make_item("B", "Fiction", 12, 4, age_days=3),
        make_item("C", "Fiction", 55, 1, age_days=2),
        make_item("D", "Romance", 8, 20, age_days=1),
    ]


@pytest.fixture
def grouped_catalog():
    """12 items in three well separated groups of four, listed group by group."""
    items = []
    for i in range(4):
        items.append(make_item(f"fic-{i}", "Fiction", 8 + i, 40 + i, age_days=i))
    for i in range(4):
        items.append(make_item(f"his-{i}", "History", 25 + i, 10 + i, age_days=10 + i))
    for i in range(4):
        items.append(make_item(f"tec-{i}", "Technology", 90 + i, 2 + i, age_days=20 + i))
    return items


@pytest.fixture
def fake_redis():
    return FakeRedis()
