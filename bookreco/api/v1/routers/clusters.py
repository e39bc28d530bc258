# bookreco/api/v1/routers/clusters.py
from fastapi import APIRouter, Depends, HTTPException
import logging
import time

from bookreco.api.deps import order_repo_dep, product_repo_dep, redis_dep, rng_dep
from bookreco.api.v1.schemas.similarity import ClusterRefreshOut
from bookreco.core.config import get_settings
from bookreco.domain.errors import RefreshInProgressError
from bookreco.domain.repositories.cluster_report_repo import ClusterReportRepo
from bookreco.domain.services.refresh_job import run_refresh

logger = logging.getLogger(__name__)

router = APIRouter(tags=["clusters"])


@router.post("/products/clusters/refresh", response_model=ClusterRefreshOut)
async def refresh_product_clusters(
    product_repo = Depends(product_repo_dep),
    order_repo = Depends(order_repo_dep),
    redis = Depends(redis_dep),
    rng = Depends(rng_dep),
):
    """
    Re-cluster the whole catalog (k = min(8, items // 4)) and report the run.
    Meant for periodic/offline calls, not for page views.
    """
    t0 = time.perf_counter()
    try:
        report, stored = await run_refresh(product_repo, order_repo, redis, rng=rng)
    except RefreshInProgressError as e:
        raise HTTPException(status_code=409, detail=e.message)
    logger.info(
        "Response: refresh_product_clusters clusters=%s stored=%s in %.4fs",
        report.cluster_count, stored, time.perf_counter() - t0,
    )
    return {**report.model_dump(), "stored": stored}


@router.get("/products/clusters/last-refresh", response_model=ClusterRefreshOut)
async def last_cluster_refresh(redis = Depends(redis_dep)):
    """Summary of the last batch refresh, when Redis kept one."""
    if redis is None:
        raise HTTPException(status_code=404, detail="No refresh report store configured")
    settings = get_settings()
    report = await ClusterReportRepo(redis, key_prefix=settings.cluster_report_prefix).get()
    if report is None:
        raise HTTPException(status_code=404, detail="No cluster refresh recorded")
    return {**report.model_dump(), "stored": True}
