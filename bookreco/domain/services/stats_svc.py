import logging
from typing import Dict, Iterable, Mapping

from bookreco.domain.models.product import CatalogItem
from bookreco.domain.models.stats import CatalogStats, CategoryPriceStats

logger = logging.getLogger(__name__)


def build_catalog_stats(items: Iterable[CatalogItem], popularity: Mapping[str, float]) -> CatalogStats:
    """
    Aggregate the normalization statistics for one clustering run.
    - per category: average / max price and item count
    - global: max stock, average price
    - popularity table as given, plus its maximum
    Items without a category contribute to the global figures only.
    """
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    maxima: Dict[str, float] = {}
    total_price = 0.0
    max_stock = 0
    n = 0

    for item in items:
        n += 1
        total_price += item.price
        max_stock = max(max_stock, item.stock)
        if item.category is None:
            continue
        totals[item.category] = totals.get(item.category, 0.0) + item.price
        counts[item.category] = counts.get(item.category, 0) + 1
        maxima[item.category] = max(maxima.get(item.category, 0.0), item.price)

    category_stats = {
        cat: CategoryPriceStats(avg_price=totals[cat] / counts[cat], max_price=maxima[cat], count=counts[cat])
        for cat in counts
    }
    pop = {str(pid): float(qty) for pid, qty in popularity.items()}
    max_popularity = max(pop.values(), default=0.0)

    stats = CatalogStats(
        category_stats=category_stats,
        popularity=pop,
        max_popularity=max_popularity,
        max_stock=max_stock,
        global_avg_price=(total_price / n) if n else None,
        total_items=n,
    )
    logger.debug(
        "catalog_stats items=%s categories=%s max_stock=%s max_popularity=%s avg_price=%s",
        n, len(category_stats), max_stock, max_popularity, stats.global_avg_price,
    )
    return stats
