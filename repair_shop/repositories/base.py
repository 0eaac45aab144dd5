"""
Shared repository plumbing: the generic SQLAlchemy repository and the
transaction helper used by every multi-step write.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import IntegrityError

from repair_shop.exceptions import ConflictError
from repair_shop.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction() -> Iterator[Any]:
    """
    Run the enclosed repository calls as one store transaction.

    Commits on normal exit.  On any exception the session is rolled
    back; a unique or foreign-key violation reported by the database
    at flush or commit time is re-raised as ``ConflictError`` so callers
    see the same error class as for a violation caught up front.

    Usage::

        with transaction():
            requests.delete_all(rows)
            cars.delete(car)
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Store rejected write: %s", exc.orig)
        raise ConflictError(
            "The change conflicts with data committed by another request."
        ) from exc
    except Exception:
        db.session.rollback()
        raise


class SqlAlchemyRepository:
    """
    CRUD and query access for one mapped model.

    Repositories never commit; they flush so that generated ids are
    available, and leave the commit to ``transaction()``.

    Query methods overwrite rows the session already holds with what
    the database returns, so a cache fed from them never receives a
    copy older than the store.
    """

    model: type = None  # set by subclasses

    def find_all(self) -> list:
        """Return every row ordered by id."""
        stmt = db.select(self.model).order_by(self.model.id)
        return self._scalars(stmt)

    def find_by_id(self, entity_id: int, refresh: bool = False):
        """
        Return the row with ``entity_id``, or None.

        Args:
            entity_id: Primary key.
            refresh:   Re-read the row from the database even if the
                       session already holds it.  Writers pass True so
                       they never build on a stale identity-map copy.
        """
        return db.session.get(self.model, entity_id, populate_existing=refresh)

    def find_by_ids(self, entity_ids) -> list:
        ids = list(entity_ids)
        if not ids:
            return []
        stmt = (
            db.select(self.model)
            .where(self.model.id.in_(ids))
            .order_by(self.model.id)
        )
        return self._scalars(stmt)

    def find_one_by(self, field: str, value: Any):
        """Return the single row whose unique ``field`` equals ``value``, or None."""
        stmt = db.select(self.model).filter_by(**{field: value})
        return db.session.execute(
            stmt.execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def find_all_by(self, field: str, value: Any) -> list:
        """Return rows whose ``field`` equals ``value`` ordered by id."""
        stmt = (
            db.select(self.model)
            .filter_by(**{field: value})
            .order_by(self.model.id)
        )
        return self._scalars(stmt)

    def exists_by(self, field: str, value: Any, exclude_id: int | None = None) -> bool:
        """True if another row already uses ``value`` for ``field``."""
        stmt = db.select(self.model.id).filter_by(**{field: value})
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return db.session.execute(stmt.limit(1)).first() is not None

    def save(self, entity):
        """Add ``entity`` to the session and flush so its id is assigned."""
        db.session.add(entity)
        db.session.flush()
        return entity

    def delete(self, entity) -> None:
        db.session.delete(entity)
        db.session.flush()

    def delete_by_id(self, entity_id: int) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True

    def delete_all(self, entities) -> int:
        count = 0
        for entity in entities:
            db.session.delete(entity)
            count += 1
        db.session.flush()
        return count

    def _scalars(self, stmt) -> list:
        stmt = stmt.execution_options(populate_existing=True)
        return list(db.session.execute(stmt).scalars())
