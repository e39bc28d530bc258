from functools import lru_cache
from typing import Literal, Optional
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "BookReco"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "bookstore"
    MONGO_TLS: bool = False                    # Atlas (mongodb+srv) needs True

    # Collections owned by the catalog / order services
    products_collection: str = "products"
    orders_collection: str = "orders"

    # Redis (optional: refresh reports + refresh lock)
    REDIS_URL: str = ""

    # Clustering
    KMEANS_SEED: Optional[int] = None          # pin to make clustering reproducible
    cluster_report_ttl: int = 7 * 24 * 3600    # keep last refresh report one week
    cluster_report_prefix: str = "clusters"
    refresh_lock_ttl: int = 120                # seconds; a refresh never runs longer

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
