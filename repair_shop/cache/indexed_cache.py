"""
Generic in-process cache for one entity kind, keyed by several access
paths.

Every cache has the primary ``id`` index plus the natural-key indexes
its kind declares (``email`` and ``phone`` for customers, ``vin`` for
cars, ...).  Each index maps a key to an entity id; the entity itself
is stored once.  All index updates for one entity happen under a single
lock, so a reader never finds the old value under one access path and
the new value under another.

The cache knows nothing about other entity kinds.  Cross-entity rules
(cascades, ownership) live in the relationship graph and the
consistency coordinator.
"""

import logging
import threading
from collections.abc import Callable, Hashable
from operator import attrgetter
from typing import Any

from repair_shop.cache.versioning import ReadToken, WriteClock

logger = logging.getLogger(__name__)

PRIMARY_INDEX = "id"


class IndexedCache:
    """
    Thread-safe multi-index cache of immutable entity snapshots.

    Args:
        name:    Entity kind name, used in logs and stats.
        indexes: Natural-key index names mapped to the function that
                 computes the key from an entity.  ``id`` is always
                 added.  A key function returning ``None`` leaves the
                 entity out of that index.

    Usage::

        customers = IndexedCache("customer", {"email": attrgetter("email")})
        customers.put(record)
        customers.get("email", "a@x.com")
    """

    def __init__(
        self,
        name: str,
        indexes: dict[str, Callable[[Any], Hashable]] | None = None,
    ) -> None:
        self.name = name
        self._key_funcs: dict[str, Callable[[Any], Hashable]] = {
            PRIMARY_INDEX: attrgetter("id"),
            **(indexes or {}),
        }
        self._lock = threading.RLock()
        self._entities: dict[Hashable, Any] = {}
        self._indexes: dict[str, dict[Hashable, Hashable]] = {
            index_name: {} for index_name in self._key_funcs
        }
        # Keys each cached entity is currently registered under, so a
        # put can evict the keys that changed.
        self._registered: dict[Hashable, dict[str, Hashable]] = {}
        self._clock = WriteClock()
        self._hits = 0
        self._misses = 0
        self._refused = 0

    @property
    def index_names(self) -> tuple[str, ...]:
        return tuple(self._key_funcs)

    # -- Reads -------------------------------------------------------------

    def get(self, index_name: str, key: Hashable) -> Any | None:
        """Return the entity cached under ``index_name`` / ``key``, or None."""
        index = self._index(index_name)
        with self._lock:
            entity_id = index.get(key)
            entity = self._entities.get(entity_id) if entity_id is not None else None
            if entity is None:
                self._misses += 1
            else:
                self._hits += 1
        logger.debug(
            "%s cache %s %s=%r",
            self.name,
            "hit" if entity is not None else "miss",
            index_name,
            key,
        )
        return entity

    def __contains__(self, entity_id: Hashable) -> bool:
        with self._lock:
            return entity_id in self._entities

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)

    # -- Writes ------------------------------------------------------------

    def put(self, entity: Any) -> None:
        """
        Insert or replace ``entity`` under every declared access path.

        Keys the entity was previously registered under and no longer
        has (an edited email, say) are evicted in the same locked step.
        Use this only for values that were just committed to the store.
        """
        keys = self._keys_for(entity)
        with self._lock:
            self._store(entity, keys)
            self._clock.stamp(entity.id)

    def read_token(self) -> ReadToken:
        """Take a token before reading the store for a read-through."""
        with self._lock:
            return self._clock.token()

    def populate(self, entity: Any, token: ReadToken) -> bool:
        """
        Cache a value read from the store, unless it may be stale.

        Returns:
            True if the entity was cached, False if a write or eviction
            for the same id (or a clear) happened after ``token`` was
            taken.
        """
        keys = self._keys_for(entity)
        with self._lock:
            if not self._clock.is_current(entity.id, token):
                self._refused += 1
                logger.debug(
                    "%s cache refused stale read-through for id=%r",
                    self.name,
                    entity.id,
                )
                return False
            self._store(entity, keys)
            return True

    def evict(self, index_name: str, key: Hashable) -> bool:
        """
        Remove the entity registered under ``index_name`` / ``key`` from
        every access path.

        Returns:
            True if an entity was removed; evicting an absent key is a
            no-op that returns False.
        """
        index = self._index(index_name)
        with self._lock:
            entity_id = index.get(key)
            if entity_id is None:
                if index_name == PRIMARY_INDEX:
                    # Still fence off in-flight read-throughs for this id.
                    self._clock.stamp(key)
                return False
            self._remove(entity_id)
            return True

    def evict_entity(self, entity: Any) -> bool:
        """
        Remove ``entity`` from all access paths it is registered under,
        plus any entry still holding one of its current natural keys.
        """
        keys = self._keys_for(entity)
        with self._lock:
            removed = self._remove(entity.id)
            for index_name, key in keys.items():
                holder = self._indexes[index_name].get(key)
                if holder is not None:
                    removed = self._remove(holder) or removed
            return removed

    def clear(self) -> None:
        """Drop every entry and invalidate all in-flight read-throughs."""
        with self._lock:
            size = len(self._entities)
            self._entities.clear()
            self._registered.clear()
            for index in self._indexes.values():
                index.clear()
            self._clock.reset()
        logger.info("%s cache cleared (%d entries dropped)", self.name, size)

    def stats(self) -> dict:
        """Return size and hit/miss counters for health checks and the CLI."""
        with self._lock:
            return {
                "name": self.name,
                "size": len(self._entities),
                "indexes": list(self._key_funcs),
                "hits": self._hits,
                "misses": self._misses,
                "refused_read_throughs": self._refused,
                "write_stamps": len(self._clock),
            }

    # -- Internal helpers (caller holds the lock) --------------------------

    def _index(self, index_name: str) -> dict[Hashable, Hashable]:
        try:
            return self._indexes[index_name]
        except KeyError:
            raise ValueError(
                f"{self.name} cache has no index '{index_name}'. "
                f"Declared indexes: {list(self._key_funcs)}"
            ) from None

    def _keys_for(self, entity: Any) -> dict[str, Hashable]:
        """Compute every access-path key up front so a failure changes nothing."""
        keys = {}
        for index_name, key_func in self._key_funcs.items():
            key = key_func(entity)
            if key is not None:
                keys[index_name] = key
        if PRIMARY_INDEX not in keys:
            raise ValueError(f"Cannot cache a {self.name} without an id.")
        return keys

    def _store(self, entity: Any, keys: dict[str, Hashable]) -> None:
        entity_id = keys[PRIMARY_INDEX]
        previous = self._registered.get(entity_id, {})

        for index_name, old_key in previous.items():
            if keys.get(index_name) != old_key:
                self._drop_key(index_name, old_key, entity_id)

        for index_name, key in keys.items():
            holder = self._indexes[index_name].get(key)
            if holder is not None and holder != entity_id:
                # Another cached entity still claims this natural key;
                # the store says it belongs to this one now.
                self._remove(holder)
            self._indexes[index_name][key] = entity_id

        self._entities[entity_id] = entity
        self._registered[entity_id] = keys

    def _remove(self, entity_id: Hashable) -> bool:
        keys = self._registered.pop(entity_id, None)
        existed = self._entities.pop(entity_id, None) is not None
        for index_name, key in (keys or {}).items():
            self._drop_key(index_name, key, entity_id)
        self._clock.stamp(entity_id)
        if existed:
            logger.debug("%s cache evicted id=%r", self.name, entity_id)
        return existed

    def _drop_key(self, index_name: str, key: Hashable, entity_id: Hashable) -> None:
        index = self._indexes[index_name]
        if index.get(key) == entity_id:
            del index[key]
