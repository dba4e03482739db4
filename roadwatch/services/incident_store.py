"""
Incident Store
Thin row-CRUD adapter over a SQLAlchemy session. Every write commits on its own,
so side effects of earlier steps survive a failure in a later one.

With no session attached the store is "unavailable": reads come back empty and
writes raise StoreUnavailable.
"""
import logging
from typing import Any, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from roadwatch.core.exceptions import NotFoundError, StoreUnavailable
from roadwatch.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class IncidentStore:
    def __init__(self, session: Optional[Session]):
        self.session = session

    @property
    def available(self) -> bool:
        return self.session is not None

    def _require_session(self, operation: str) -> Session:
        if self.session is None:
            raise StoreUnavailable(f"Cannot {operation}: database not available")
        return self.session

    # ─────────────────────────── Writes ───────────────────────────

    def insert(self, model: Type[ModelT], **values: Any) -> int:
        """Insert one row and return its id."""
        db = self._require_session(f"insert into {model.__tablename__}")
        row = model(**values)
        db.add(row)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(row)
        logger.debug(f"[STORE] {model.__tablename__} #{row.id} inserted")
        return row.id

    def update(self, model: Type[ModelT], row_id: int, **patch: Any) -> None:
        db = self._require_session(f"update {model.__tablename__}")
        row = db.get(model, row_id)
        if row is None:
            raise NotFoundError(model.__name__, row_id)
        for field, value in patch.items():
            setattr(row, field, value)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise

    # ─────────────────────────── Reads ───────────────────────────

    def get(self, model: Type[ModelT], row_id: int) -> Optional[ModelT]:
        if self.session is None:
            logger.warning(f"[STORE] Cannot get {model.__tablename__}: database not available")
            return None
        return self.session.get(model, row_id)

    def list_by(self, model: Type[ModelT], column: str, value: Any) -> List[ModelT]:
        """All rows where *column* equals *value*, in insertion order."""
        if self.session is None:
            logger.warning(f"[STORE] Cannot list {model.__tablename__}: database not available")
            return []
        stmt = select(model).where(getattr(model, column) == value).order_by(model.id)
        return list(self.session.scalars(stmt))

    def list_all(self, model: Type[ModelT], limit: int = 50, offset: int = 0) -> List[ModelT]:
        if self.session is None:
            logger.warning(f"[STORE] Cannot list {model.__tablename__}: database not available")
            return []
        stmt = select(model).order_by(model.id).limit(limit).offset(offset)
        return list(self.session.scalars(stmt))
