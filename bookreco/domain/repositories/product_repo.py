# bookreco/domain/repositories/product_repo.py

from __future__ import annotations
import logging
from typing import Optional, List
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from bookreco.domain.models.product import CatalogItem

logger = logging.getLogger(__name__)

# Fields the recommender reads; everything else stays in Mongo
_PROJECTION = {
    "_id": 0,
    "product_id": 1,
    "name": 1,
    "category": 1,
    "price": 1,
    "stock": 1,
    "created_at": 1,
}


class ProductRepo:
    """
    Read-only catalog queries on the 'products' collection.
    Documents are expected as:
      { product_id, name, category, price, stock, created_at }
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    @staticmethod
    def _to_items(docs: List[dict]) -> List[CatalogItem]:
        items: List[CatalogItem] = []
        for doc in docs:
            try:
                items.append(CatalogItem.model_validate(doc))
            except ValidationError as e:
                # skip it, keep the rest of the catalog
                logger.warning("Skipping invalid product document product_id=%s: %s", doc.get("product_id"), e)
        return items

    async def get_by_product_id(self, product_id: str) -> Optional[CatalogItem]:
        """None when missing or when the stored document is not a valid item."""
        doc = await self.col.find_one({"product_id": product_id}, _PROJECTION)
        if not doc:
            return None
        try:
            return CatalogItem.model_validate(doc)
        except ValidationError as e:
            logger.warning("Invalid product document product_id=%s: %s", product_id, e)
            return None

    async def list_all(self, exclude_product_id: Optional[str] = None) -> List[CatalogItem]:
        """Whole catalog snapshot, optionally without one item."""
        query = {"product_id": {"$ne": exclude_product_id}} if exclude_product_id else {}
        docs = [doc async for doc in self.col.find(query, _PROJECTION)]
        return self._to_items(docs)

    async def find_by_category(
        self, category: str, *, exclude_product_id: Optional[str] = None, limit: int = 10
    ) -> List[CatalogItem]:
        """Most recently catalogued items of a category (created_at desc)."""
        query: dict = {"category": category}
        if exclude_product_id:
            query["product_id"] = {"$ne": exclude_product_id}
        cursor = self.col.find(query, _PROJECTION).sort("created_at", -1).limit(limit)
        docs = [doc async for doc in cursor]
        return self._to_items(docs)
