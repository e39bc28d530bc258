# bookreco/api/deps.py
import numpy as np
from fastapi import Depends
from bookreco.core.config import get_settings
from bookreco.db.mongo import get_db
from bookreco.db.redis import get_redis
from bookreco.domain.repositories.product_repo import ProductRepo
from bookreco.domain.repositories.order_repo import OrderRepo

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db

# Dependency for injecting the Redis client (may be None)
def redis_dep():
    return get_redis()

def product_repo_dep(db = Depends(mongo_db)) -> ProductRepo:
    return ProductRepo(db, get_settings().products_collection)

def order_repo_dep(db = Depends(mongo_db)) -> OrderRepo:
    return OrderRepo(db, get_settings().orders_collection)

# Fresh generator per request unless KMEANS_SEED pins it
def rng_dep() -> np.random.Generator:
    return np.random.default_rng(get_settings().KMEANS_SEED)
