# bookreco/domain/repositories/order_repo.py

from __future__ import annotations
import json
import logging
import time
from typing import Any, Dict, List
from motor.motor_asyncio import AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

CANCELLED_STATUS = "cancelled"


def _json_preview(obj: Any, limit: int = 1000) -> str:
    """Minify and truncate JSON for debug logs."""
    try:
        s = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
        return s if len(s) <= limit else s[:limit] + "…[truncated]"
    except (TypeError, ValueError):
        return "<unserializable>"


def popularity_pipeline() -> List[Dict[str, Any]]:
    """Total ordered quantity per product over non-cancelled orders."""
    return [
        {"$match": {"status": {"$ne": CANCELLED_STATUS}}},
        {"$unwind": "$cart"},
        {"$group": {
            "_id": "$cart.product_id",
            "units": {"$sum": "$cart.amount"},
        }},
        {"$project": {"_id": 0, "product_id": "$_id", "units": 1}},
    ]


class OrderRepo:
    """
    Order-history queries on the 'orders' collection.
    Orders look like: { status, cart: [{ product_id, amount, price }], ... }
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "orders"):
        self.col = db[collection_name]

    async def get_popularity(self) -> Dict[str, float]:
        pipeline = popularity_pipeline()
        logger.debug("popularity pipeline=%s", _json_preview(pipeline))

        t0 = time.perf_counter()
        docs = await self.col.aggregate(pipeline).to_list(length=None)
        logger.info("popularity db_ok products=%s db_time=%.3fs", len(docs), time.perf_counter() - t0)

        return {
            str(d["product_id"]): float(d.get("units") or 0)
            for d in docs
            if d.get("product_id") is not None
        }
