from typing import Optional
from redis.asyncio import Redis
from bookreco.domain.models.product import ClusterRefreshReport


class ClusterReportRepo:
    """
    Adapter keeping the summary of the last batch cluster refresh in Redis.
    Only the summary is stored, never cluster assignments.
    """
    def __init__(self, redis: Redis, key_prefix: str = "clusters"):
        self.cache = redis
        self.prefix = key_prefix

    def key(self) -> str:
        return f"{self.prefix}:last_refresh"

    async def get(self) -> Optional[ClusterRefreshReport]:
        raw = await self.cache.get(self.key())
        if raw:
            return ClusterRefreshReport.model_validate_json(raw)
        return None

    async def set(self, report: ClusterRefreshReport, ttl: int) -> None:
        await self.cache.set(self.key(), report.model_dump_json(), ex=ttl)
