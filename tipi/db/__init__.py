"""
db/
----
Per-user session stores.

  in_memory (default): process-lifetime dicts
  redis:              JSON values, key prefix tipi:profile / tipi:itinerary,
                       TTL = SESSION_TTL (24 h)

Public exports:
    from tipi.db import SessionStores, build_stores
"""

from tipi.db.store import (
    InMemoryStore,
    KeyValueStore,
    RedisStore,
    SessionStores,
    StoreError,
    build_stores,
)

__all__ = ["InMemoryStore", "KeyValueStore", "RedisStore", "SessionStores", "StoreError", "build_stores"]
