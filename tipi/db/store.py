"""
db/store.py
-----------
Per-user session state behind a small key-value interface.

  profiles     user_id -> TravelProfile   (chat grounding)
  itineraries  user_id -> Itinerary       (one active itinerary per user)

Values are stored as JSON-ready dicts so the in-memory and Redis backends
behave the same. Concurrent writes for one user id are last-writer-wins.
Backend failures surface as StoreError.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import redis

from tipi import config
from tipi.db.redis_client import get_redis
from tipi.schemas.itinerary import Itinerary, itinerary_from_dict, itinerary_to_dict
from tipi.schemas.profile import TravelProfile

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """The session store could not be read or written."""


class KeyValueStore(ABC):
    """Interface: get / set / delete by user identifier."""

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: dict) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""


class InMemoryStore(KeyValueStore):
    """Process-lifetime dict. Lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        return self._data.get(key)

    def set(self, key: str, value: dict) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


class RedisStore(KeyValueStore):
    """
    JSON values under ``{namespace}:{key}`` with a sliding TTL
    (config.SESSION_TTL, reset on every write).
    """

    def __init__(
        self,
        namespace: str,
        client: Optional[redis.Redis] = None,
        ttl_s: Optional[int] = None,
    ) -> None:
        self._namespace = namespace
        self._client = client
        self._ttl_s = ttl_s if ttl_s is not None else config.SESSION_TTL

    @property
    def client(self) -> redis.Redis:
        return self._client if self._client is not None else get_redis()

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> Optional[dict]:
        try:
            raw = self.client.get(self._key(key))
            return json.loads(raw) if raw else None
        except (redis.RedisError, ValueError) as exc:
            raise StoreError(f"Redis read failed for {self._key(key)}: {exc}") from exc

    def set(self, key: str, value: dict) -> None:
        encoded = json.dumps(value, ensure_ascii=False)
        try:
            if self._ttl_s > 0:
                self.client.setex(self._key(key), self._ttl_s, encoded)
            else:
                self.client.set(self._key(key), encoded)
        except redis.RedisError as exc:
            raise StoreError(f"Redis write failed for {self._key(key)}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as exc:
            raise StoreError(f"Redis delete failed for {self._key(key)}: {exc}") from exc


class SessionStores:
    """Typed access to the profile and itinerary stores."""

    def __init__(self, profiles: KeyValueStore, itineraries: KeyValueStore) -> None:
        self.profiles = profiles
        self.itineraries = itineraries

    def save_profile(self, profile: TravelProfile) -> None:
        self.profiles.set(profile.user_id, profile.to_dict())

    def load_profile(self, user_id: str) -> Optional[TravelProfile]:
        data = self.profiles.get(user_id)
        return TravelProfile.from_dict(data) if data else None

    def save_itinerary(self, user_id: str, itinerary: Itinerary) -> None:
        self.itineraries.set(user_id, itinerary_to_dict(itinerary))

    def load_itinerary(self, user_id: str) -> Optional[Itinerary]:
        data = self.itineraries.get(user_id)
        return itinerary_from_dict(data) if data else None

    def save_trip(self, profile: TravelProfile, itinerary: Itinerary) -> None:
        """
        Write profile then itinerary for ``profile.user_id``. If the itinerary
        write fails the profile is removed again, so a failed save never
        leaves a profile without its itinerary. The write error is re-raised.
        """
        self.save_profile(profile)
        try:
            self.save_itinerary(profile.user_id, itinerary)
        except Exception:
            try:
                self.profiles.delete(profile.user_id)
            except Exception:
                logger.exception("Could not roll back profile for %s", profile.user_id)
            raise

    def load_itinerary_dict(self, user_id: str) -> Optional[dict[str, Any]]:
        return self.itineraries.get(user_id)

    def forget(self, user_id: str) -> None:
        self.profiles.delete(user_id)
        self.itineraries.delete(user_id)


def build_stores(backend: Optional[str] = None) -> SessionStores:
    """Pick the backend from config.STORE_BACKEND ("in_memory" | "redis")."""
    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "redis":
        return SessionStores(RedisStore("tipi:profile"), RedisStore("tipi:itinerary"))
    if backend in ("in_memory", "memory"):
        return SessionStores(InMemoryStore(), InMemoryStore())
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")
