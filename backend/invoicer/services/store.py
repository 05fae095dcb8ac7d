"""
Helpers shared by the persistence adapters.

Every record belongs to one owner. Reads of another owner's record raise
PermissionDeniedError; database failures are rolled back and surfaced as
PersistenceError so handlers never see driver exceptions.
"""
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicer.exceptions import PermissionDeniedError, PersistenceError, RecordNotFoundError

logger = logging.getLogger(__name__)


def fetch_owned(db: Session, model, record_id: int, owner_id: str, path: str, operation: str = "get"):
    """Load a record by id and check it belongs to owner_id"""
    try:
        record = db.query(model).filter(model.id == record_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to read {path}: {e}")
        raise PersistenceError(f"Failed to load {path}", operation=operation, path=path) from e

    if record is None:
        raise RecordNotFoundError(f"{path} not found", operation=operation, path=path)
    if record.owner_id != owner_id:
        raise PermissionDeniedError(f"Permission denied for {path}", operation=operation, path=path)
    return record


def commit(db: Session, operation: str, path: str, message: str):
    """Commit the session, rolling back and raising PersistenceError on failure"""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during {operation} on {path}: {e}", exc_info=True)
        raise PersistenceError(message, operation=operation, path=path) from e
