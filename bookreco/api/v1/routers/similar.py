# bookreco/api/v1/routers/similar.py
from fastapi import APIRouter, Depends, HTTPException, Query
import time
import logging

from bookreco.api.deps import order_repo_dep, product_repo_dep, rng_dep
from bookreco.api.v1.schemas.similarity import SimilarityResultOut
from bookreco.domain.errors import ProductNotFoundError
from bookreco.domain.services.constants import DEFAULT_SIMILAR_LIMIT
from bookreco.domain.services.similar_products_svc import find_similar_products

logger = logging.getLogger(__name__)

router = APIRouter(tags=["similar"])


@router.get("/products/{product_id}/similar", response_model=SimilarityResultOut)
async def similar_products(
    product_id: str,
    limit: int = Query(DEFAULT_SIMILAR_LIMIT, ge=1, le=50),
    product_repo = Depends(product_repo_dep),
    order_repo = Depends(order_repo_dep),
    rng = Depends(rng_dep),
):
    """
    Similar books for a product page.
    Pipeline: catalog + order stats → feature vectors → k-means → rank cluster-mates,
    falling back to "same category, most recent" when clustering is inconclusive.
    """
    logger.info("Request: similar_products product_id=%s, limit=%s", product_id, limit)
    start_time = time.perf_counter()

    try:
        res = await find_similar_products(product_repo, order_repo, product_id, limit, rng=rng)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    logger.info(
        "Response: similar_products product_id=%s, count=%s, strategy=%s, elapsed_time=%.4fs",
        product_id, res.count, res.strategy, time.perf_counter() - start_time,
    )
    return res.model_dump()
