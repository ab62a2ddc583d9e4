# compost_api/db.py
from __future__ import annotations

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient

from compost_api.core.config import settings

# --------------------------------------------------
# MongoDB Connection (settings with safe defaults)
# --------------------------------------------------
@lru_cache(maxsize=1)
def get_client() -> AsyncIOMotorClient:
    # Cached to play nicely with uvicorn --reload
    return AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)

def get_db():
    return get_client()[settings.mongo_db]

__all__ = ["get_client", "get_db"]
