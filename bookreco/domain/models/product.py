from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

class CatalogItem(BaseModel):
    product_id: str
    name: Optional[str] = None
    category: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    stock: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None

    model_config = {"frozen": True}  # read-only snapshot of the catalog

ClusterSource = Literal["cluster", "category"]
Strategy = Literal["cluster", "category_fallback"]
FallbackReason = Literal[
    "insufficient_catalog",   # fewer than 3 other items, clustering skipped
    "target_unassigned",      # target missing from every cluster
    "cluster_too_small",      # target alone in its cluster
    "computation_error",      # unexpected failure while clustering
]

class ClusterInfo(BaseModel):
    source: ClusterSource
    cluster_id: Optional[int] = None
    cluster_size: Optional[int] = None
    reason: str
    model_config = {"frozen": True}

class SimilarItem(BaseModel):
    item: CatalogItem
    similarity_score: float = Field(ge=0, le=1)
    cluster_info: ClusterInfo
    model_config = {"frozen": True}

class SimilarityResult(BaseModel):
    source_product_id: str
    items: List[SimilarItem]
    count: int
    strategy: Strategy
    fallback_reason: Optional[FallbackReason] = None
    model_config = {"frozen": True}

class ClusterRefreshReport(BaseModel):
    cluster_count: int
    iterations: int
    converged: bool
    items_processed: int
    refreshed_at: Optional[datetime] = None
    model_config = {"frozen": True}
