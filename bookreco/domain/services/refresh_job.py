import logging
from typing import Optional, Tuple

import numpy as np

from bookreco.core.config import get_settings
from bookreco.domain.errors import RefreshInProgressError
from bookreco.domain.models.product import ClusterRefreshReport
from bookreco.domain.repositories.cluster_report_repo import ClusterReportRepo
from bookreco.domain.services.similar_products_svc import refresh_clusters
from bookreco.utils.locks import RedisLock

logger = logging.getLogger(__name__)

REFRESH_LOCK_KEY = "clusters:refresh"


async def run_refresh(
    product_repo,
    order_repo,
    redis,
    *,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[ClusterRefreshReport, bool]:
    """
    Batch refresh wrapper shared by the HTTP route and the CLI job.
    - With Redis: hold RedisLock for the run and store the report.
    - Without Redis: run unguarded, nothing stored.
    Returns (report, stored).
    """
    settings = get_settings()
    if redis is None:
        logger.info("cluster refresh without Redis: no lock, report not stored")
        return await refresh_clusters(product_repo, order_repo, rng=rng), False

    lock = RedisLock(redis, REFRESH_LOCK_KEY, ttl=settings.refresh_lock_ttl)
    if not await lock.acquire():
        logger.warning("cluster refresh rejected: lock %s is held", lock.key)
        raise RefreshInProgressError(lock.key)
    try:
        report = await refresh_clusters(product_repo, order_repo, rng=rng)
    finally:
        await lock.release()

    try:
        await ClusterReportRepo(redis, key_prefix=settings.cluster_report_prefix).set(
            report, ttl=settings.cluster_report_ttl
        )
    except Exception as e:
        logger.warning("cluster refresh report not stored: %s", e)
        return report, False
    return report, True
