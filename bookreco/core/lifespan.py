# bookreco/core/lifespan.py
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from bookreco.db import mongo, redis as r
from bookreco.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is mandatory: catalog and order history live there
    try:
        await mongo.connect()
        logger.info("Mongo connected db=%s", settings.MONGO_DB)
    except Exception as e:
        logger.error("Mongo connection failed: %s", e)
        raise

    # Redis is optional (refresh reports + lock)
    if settings.REDIS_URL:
        await r.connect()
    else:
        logger.warning("No REDIS_URL provided, refresh reports will not be stored")

    yield

    # --- Shutdown ---
    await r.disconnect()
    await mongo.disconnect()
    logger.info("Connections closed")
