from compost_api.core.config import settings

if settings.use_mongo:
    from .db import get_db
    from .repos.mongo import MongoStore
    _store_singleton = MongoStore(get_db())
else:
    from .repos.inmemory import InMemoryStore
    _store_singleton = InMemoryStore()

def get_store():
    return _store_singleton
