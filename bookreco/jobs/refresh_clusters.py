"""Batch re-clustering of the whole catalog, for cron / offline use.

Example:
    $ python -m bookreco.jobs.refresh_clusters
    $ python -m bookreco.jobs.refresh_clusters --seed 42 --verbose
"""

import argparse
import asyncio
import logging
import sys

import numpy as np

from bookreco.core.config import get_settings
from bookreco.core.logging import configure_logging
from bookreco.db import mongo, redis as r
from bookreco.domain.errors import RefreshInProgressError
from bookreco.domain.repositories.order_repo import OrderRepo
from bookreco.domain.repositories.product_repo import ProductRepo
from bookreco.domain.services.refresh_job import run_refresh

logger = logging.getLogger("bookreco.jobs.refresh_clusters")


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Re-cluster the product catalog and store the run report.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for centroid initialization (default: KMEANS_SEED or random)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging (per-iteration k-means output)")
    return parser.parse_args(argv)


async def _run(seed) -> int:
    settings = get_settings()
    await mongo.connect()
    await r.connect()
    try:
        db = mongo.get_db()
        rng = np.random.default_rng(seed if seed is not None else settings.KMEANS_SEED)
        report, stored = await run_refresh(
            ProductRepo(db, settings.products_collection),
            OrderRepo(db, settings.orders_collection),
            r.get_redis(),
            rng=rng,
        )
    except RefreshInProgressError as e:
        logger.error("%s", e.message)
        return 2
    finally:
        await r.disconnect()
        await mongo.disconnect()

    logger.info(
        "clusters=%s iterations=%s converged=%s items=%s stored=%s",
        report.cluster_count, report.iterations, report.converged, report.items_processed, stored,
    )
    return 0


def main(argv=None) -> int:
    args = parse_arguments(argv)
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO, datefmt="%Y-%m-%d %H:%M:%S")
    return asyncio.run(_run(args.seed))


if __name__ == "__main__":
    sys.exit(main())
