# api/v1/schemas/similarity.py
from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional

class ProductOut(BaseModel):
    product_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    price: float
    stock: int

class ClusterInfoOut(BaseModel):
    source: str
    cluster_id: Optional[int] = None
    cluster_size: Optional[int] = None
    reason: str

class SimilarItemOut(BaseModel):
    item: ProductOut
    similarity_score: float
    cluster_info: ClusterInfoOut

class SimilarityResultOut(BaseModel):
    source_product_id: str
    items: List[SimilarItemOut]
    count: int
    strategy: str
    fallback_reason: Optional[str] = None

class ClusterRefreshOut(BaseModel):
    cluster_count: int
    iterations: int
    converged: bool
    items_processed: int
    refreshed_at: Optional[datetime] = None
    stored: bool = False
