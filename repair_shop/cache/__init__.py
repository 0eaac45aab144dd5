"""
In-process entity cache and relational-consistency layer.

The submodules that touch models and repositories (``kinds``,
``relationship_graph``, ``coordinator``) are imported explicitly where
needed; this package only re-exports the store-independent pieces.
"""

from repair_shop.cache.indexed_cache import PRIMARY_INDEX, IndexedCache  # noqa: F401
from repair_shop.cache.versioning import ReadToken, WriteClock  # noqa: F401
