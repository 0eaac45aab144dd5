"""
Flask extension that owns the entity caches of one application.

``CacheManager`` holds no state itself.  ``init_app()`` builds an
``EntityCacheRegistry`` (one ``IndexedCache`` per entity kind, the
relationship graph and the consistency coordinator) and stores it in
``app.extensions`` so every application, including each test app, gets
its own empty caches.

Usage::

    from repair_shop.extensions import entity_cache

    entity_cache.init_app(app)                 # in create_app()
    entity_cache.coordinator.find_by_id("car", 3)  # inside a request
"""

import logging
from dataclasses import dataclass
from operator import attrgetter

from flask import Flask, current_app

logger = logging.getLogger(__name__)

EXTENSION_KEY = "entity_cache"


@dataclass
class EntityCacheRegistry:
    """Everything ``init_app`` builds for one application."""

    kinds: dict
    caches: dict
    graph: object
    coordinator: object

    def close(self) -> None:
        """Drop all cached state; called on application shutdown."""
        self.coordinator.reset()


class CacheManager:
    """Flask extension wrapper around the per-app cache registry."""

    def __init__(self, app: Flask | None = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Build an empty registry for ``app``."""
        # Imported here because the kinds pull in models and repositories,
        # which themselves import ``db`` from ``repair_shop.extensions``.
        # pylint: disable=import-outside-toplevel
        from repair_shop.cache.coordinator import ConsistencyCoordinator
        from repair_shop.cache.indexed_cache import IndexedCache
        from repair_shop.cache.kinds import build_kinds
        from repair_shop.cache.relationship_graph import RelationshipGraph
        from repair_shop.repositories import ServiceCenterLinkRepository

        kinds = build_kinds()
        caches = {
            name: IndexedCache(
                name,
                {field: attrgetter(field) for field in kind.unique_fields},
            )
            for name, kind in kinds.items()
        }
        links = ServiceCenterLinkRepository()
        graph = RelationshipGraph(kinds, links)
        coordinator = ConsistencyCoordinator(kinds, caches, graph, links)

        app.extensions[EXTENSION_KEY] = EntityCacheRegistry(
            kinds=kinds,
            caches=caches,
            graph=graph,
            coordinator=coordinator,
        )
        logger.debug("Entity caches initialized: %s", ", ".join(caches))

    @property
    def registry(self) -> EntityCacheRegistry:
        """Registry of the current application."""
        try:
            return current_app.extensions[EXTENSION_KEY]
        except KeyError:
            raise RuntimeError(
                "Entity cache is not initialized for this application. "
                "Did you call entity_cache.init_app(app)?"
            ) from None

    @property
    def coordinator(self):
        return self.registry.coordinator

    def shutdown(self, app: Flask) -> None:
        """Release the caches of ``app`` (server shutdown, test teardown)."""
        registry = app.extensions.get(EXTENSION_KEY)
        if registry is not None:
            registry.close()
            logger.info("Entity caches released")
