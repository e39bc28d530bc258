import logging
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from bookreco.domain.errors import ProductNotFoundError
from bookreco.domain.models.product import (
    CatalogItem,
    ClusterInfo,
    ClusterRefreshReport,
    SimilarItem,
    SimilarityResult,
)
from bookreco.domain.services.constants import (
    CATEGORY_FALLBACK_SCORE,
    DEFAULT_SIMILAR_LIMIT,
    MIN_CLUSTER_SIZE,
    MIN_K,
    MIN_OTHER_ITEMS,
    REFRESH_ITEMS_PER_CLUSTER,
    REFRESH_MAX_K,
    SIMILAR_ITEMS_PER_CLUSTER,
    SIMILAR_MAX_K,
)
from bookreco.domain.services.features import extract_features
from bookreco.domain.services.kmeans import KMeansResult, kmeans
from bookreco.domain.services.stats_svc import build_catalog_stats

logger = logging.getLogger(__name__)


def distance_to_similarity(distance: float) -> float:
    """Linear map: distance 0 -> 1.0, distance >= 2 -> 0.0."""
    return max(0.0, 1.0 - distance / 2.0)


def similar_k(other_count: int) -> int:
    return max(MIN_K, min(SIMILAR_MAX_K, other_count // SIMILAR_ITEMS_PER_CLUSTER))


def refresh_k(item_count: int) -> int:
    return min(REFRESH_MAX_K, item_count // REFRESH_ITEMS_PER_CLUSTER)


async def _cluster_catalog(
    items: Sequence[CatalogItem], order_repo, k: int, rng: Optional[np.random.Generator]
) -> KMeansResult[CatalogItem]:
    """statistics snapshot -> feature vectors -> k-means, for one call."""
    popularity = await order_repo.get_popularity()
    stats = build_catalog_stats(items, popularity)
    points: List[Tuple[CatalogItem, List[float]]] = [(it, extract_features(it, stats)) for it in items]
    return kmeans(points, k, rng=rng)


async def category_fallback(
    product_repo,
    target: CatalogItem,
    limit: int,
    *,
    skip_ids: Optional[Set[str]] = None,
) -> List[SimilarItem]:
    """
    Most recently catalogued items sharing the target's category, fixed score.
    `skip_ids` are left out (used when topping up a cluster result).
    """
    if limit <= 0 or not target.category:
        return []
    skip_ids = skip_ids or set()
    # over-fetch by the number of ids we may have to skip
    candidates = await product_repo.find_by_category(
        target.category,
        exclude_product_id=target.product_id,
        limit=limit + len(skip_ids),
    )
    info = ClusterInfo(source="category", reason=f"Same category: {target.category}")
    out: List[SimilarItem] = []
    for item in candidates:
        if item.product_id == target.product_id or item.product_id in skip_ids:
            continue
        out.append(SimilarItem(item=item, similarity_score=CATEGORY_FALLBACK_SCORE, cluster_info=info))
        if len(out) >= limit:
            break
    return out


async def _fallback_result(product_repo, target: CatalogItem, limit: int, reason: str) -> SimilarityResult:
    items = await category_fallback(product_repo, target, limit)
    return SimilarityResult(
        source_product_id=target.product_id,
        items=items,
        count=len(items),
        strategy="category_fallback",
        fallback_reason=reason,
    )


async def find_similar_products(
    product_repo,
    order_repo,
    product_id: str,
    limit: int = DEFAULT_SIMILAR_LIMIT,
    *,
    rng: Optional[np.random.Generator] = None,
) -> SimilarityResult:
    """
    Items similar to `product_id`, ranked by closeness inside its k-means cluster.

    Flow:
      1) Load the target (ProductNotFoundError if missing) and the rest of the catalog.
      2) Fewer than 3 other items: category fallback, no clustering.
      3) Statistics snapshot + feature vectors + k-means with k = max(2, min(5, others // 3)).
      4) Target alone or missing: category fallback.
      5) Cluster-mates by ascending distance to the centroid, top `limit`,
         topped up with category items when short.
    Unexpected errors in 3) are logged with traceback and degrade to the
    category fallback (fallback_reason="computation_error").
    """
    if limit < 1:
        raise ValueError("limit must be a positive integer")

    t0 = time.perf_counter()
    logger.info("similar start product_id=%s limit=%s", product_id, limit)

    target = await product_repo.get_by_product_id(product_id)
    if not target:
        logger.warning("Product not found: product_id=%s", product_id)
        raise ProductNotFoundError(product_id)

    others = await product_repo.list_all(exclude_product_id=product_id)
    others = [o for o in others if o.product_id != product_id]
    if len(others) < MIN_OTHER_ITEMS:
        logger.info("similar insufficient_catalog product_id=%s others=%s", product_id, len(others))
        return await _fallback_result(product_repo, target, limit, "insufficient_catalog")

    k = similar_k(len(others))
    try:
        result = await _cluster_catalog([target, *others], order_repo, k, rng)
    except Exception:
        logger.exception("K-means similarity failed for product_id=%s, using category fallback", product_id)
        return await _fallback_result(product_repo, target, limit, "computation_error")

    cluster_idx = next(
        (i for i, members in enumerate(result.clusters)
         if any(m.entity.product_id == product_id for m in members)),
        None,
    )
    if cluster_idx is None:
        logger.warning("similar target_unassigned product_id=%s", product_id)
        return await _fallback_result(product_repo, target, limit, "target_unassigned")

    members = result.clusters[cluster_idx]
    if len(members) < MIN_CLUSTER_SIZE:
        logger.info("similar cluster_too_small product_id=%s cluster=%s", product_id, cluster_idx)
        return await _fallback_result(product_repo, target, limit, "cluster_too_small")

    info = ClusterInfo(
        source="cluster",
        cluster_id=cluster_idx,
        cluster_size=len(members),
        reason="Similar features and characteristics",
    )
    mates = sorted(
        (m for m in members if m.entity.product_id != product_id),
        key=lambda m: m.distance,
    )[:limit]
    items = [
        SimilarItem(item=m.entity, similarity_score=distance_to_similarity(m.distance), cluster_info=info)
        for m in mates
    ]

    if len(items) < limit:
        seen = {it.item.product_id for it in items}
        items.extend(await category_fallback(product_repo, target, limit - len(items), skip_ids=seen))

    logger.info(
        "similar done product_id=%s k=%s cluster=%s size=%s items=%s iterations=%s converged=%s time=%.3fs",
        product_id, k, cluster_idx, len(members), len(items),
        result.iterations, result.converged, time.perf_counter() - t0,
    )
    return SimilarityResult(
        source_product_id=product_id,
        items=items,
        count=len(items),
        strategy="cluster",
    )


async def refresh_clusters(product_repo, order_repo, *, rng: Optional[np.random.Generator] = None) -> ClusterRefreshReport:
    """
    Batch run of the full pipeline over the whole catalog with
    k = min(8, items // 4). Nothing is persisted; the report summarizes the run.
    Errors propagate to the caller.
    """
    t0 = time.perf_counter()
    items = await product_repo.list_all()
    logger.info("cluster refresh start items=%s", len(items))

    if not items:
        logger.warning("cluster refresh skipped: empty catalog")
        return ClusterRefreshReport(
            cluster_count=0, iterations=0, converged=False, items_processed=0,
            refreshed_at=datetime.now(timezone.utc),
        )

    result = await _cluster_catalog(items, order_repo, refresh_k(len(items)), rng)
    report = ClusterRefreshReport(
        cluster_count=result.non_empty_clusters,
        iterations=result.iterations,
        converged=result.converged,
        items_processed=len(items),
        refreshed_at=datetime.now(timezone.utc),
    )
    logger.info(
        "cluster refresh done clusters=%s iterations=%s converged=%s items=%s time=%.3fs",
        report.cluster_count, report.iterations, report.converged, report.items_processed,
        time.perf_counter() - t0,
    )
    return report
