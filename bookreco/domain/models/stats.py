from pydantic import BaseModel
from typing import Dict, Optional

class CategoryPriceStats(BaseModel):
    avg_price: float
    max_price: float
    count: int
    model_config = {"frozen": True}

class CatalogStats(BaseModel):
    """
    Normalization snapshot for one resolution call.
    Built once from the catalog and the order history, then only read.
    """
    category_stats: Dict[str, CategoryPriceStats] = {}
    popularity: Dict[str, float] = {}
    max_popularity: float = 0.0
    max_stock: int = 0
    global_avg_price: Optional[float] = None
    total_items: int = 0

    model_config = {"frozen": True}
