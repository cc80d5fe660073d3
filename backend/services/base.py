from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Type
import logging
import math

from sqlalchemy.orm import Session, Query

from utils.db_error_handler import map_database_error
from utils.errors import AppError, AccessDeniedError, NotFoundError

logger = logging.getLogger(__name__)

class BaseService:
    """Shared plumbing for the domain services.

    Every storage call that can fail goes through ``db_operation`` so that
    SQLAlchemy errors are rolled back and translated exactly once.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def db_operation(self, context: str):
        """Run a block of storage work, rolling back and mapping any failure."""
        try:
            yield
        except AppError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            mapped = map_database_error(e, context)
            logger.error(f"{context} failed: {mapped.code} {str(e)}")
            raise mapped from e

    def get_owned(self, model: Type, entity_id: str, user_id: str, label: str,
                  soft_deleted: bool = True):
        """Fetch a row by id that belongs to the user.

        Rows of other users are reported as missing so their existence is not
        revealed.
        """
        query = self.db.query(model).filter(model.id == str(entity_id), model.user_id == user_id)
        if soft_deleted:
            query = query.filter(model.is_deleted == False)  # noqa: E712
        entity = query.first()
        if not entity:
            raise NotFoundError(f"{label} not found")
        return entity

    def get_for_mutation(self, model: Type, entity_id: str, user_id: str, label: str):
        """Fetch a row that the user is about to mutate.

        Unknown ids raise NotFoundError and rows owned by someone else raise
        AccessDeniedError.
        """
        entity = self.db.query(model).filter(model.id == str(entity_id)).first()
        if not entity or getattr(entity, 'is_deleted', False):
            raise NotFoundError(f"{label} not found")
        if entity.user_id != user_id:
            logger.warning(f"User {user_id} denied access to {label.lower()} {entity_id}")
            raise AccessDeniedError(f"Access denied to {label.lower()}")
        return entity

    def paginate(self, query: Query, page: int, limit: int, order_by: Optional[Any] = None,
                 serializer=None) -> Dict[str, Any]:
        """Return one page of ``query`` as ``{data, pagination}``.

        The count runs first and an empty result skips the data query.
        """
        total = query.order_by(None).count()
        pages = math.ceil(total / limit) if total else 0
        data: List[Any] = []
        if total:
            if order_by is not None:
                query = query.order_by(order_by)
            rows = query.offset((page - 1) * limit).limit(limit).all()
            data = [serializer(row) for row in rows] if serializer else rows
        return {
            "data": data,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": pages,
            },
        }
