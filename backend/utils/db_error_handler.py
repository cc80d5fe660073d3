from typing import Optional
import logging

from sqlalchemy.exc import (
    SQLAlchemyError,
    IntegrityError,
    OperationalError,
    DataError,
    NoResultFound,
    InterfaceError,
    ProgrammingError,
)

from utils.errors import (
    AppError,
    DatabaseError,
    DuplicateEntryError,
    ConstraintViolationError,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes mapped to the error taxonomy
PG_ERROR_MAP = {
    '23505': DuplicateEntryError,       # unique_violation
    '23000': ConstraintViolationError,  # integrity_constraint_violation
    '23503': ConstraintViolationError,  # foreign_key_violation
    '23502': ConstraintViolationError,  # not_null_violation
    '23514': ConstraintViolationError,  # check_violation
    '22000': ValidationError,           # data_exception
    '22001': ValidationError,           # string_data_right_truncation
    '22P02': ValidationError,           # invalid_text_representation
    '02000': NotFoundError,             # no_data
    '42P01': NotFoundError,             # undefined_table
    '28000': UnauthorizedError,         # invalid_authorization_specification
    '28P01': UnauthorizedError,         # invalid_password
}

CONNECTION_ERROR_CODES = {'08000', '08003', '08006'}

def _pgcode(error: SQLAlchemyError) -> Optional[str]:
    orig = getattr(error, 'orig', None)
    return getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)

def _message(error: SQLAlchemyError) -> str:
    orig = getattr(error, 'orig', None)
    return str(orig if orig is not None else error)

def map_database_error(error: Exception, context: Optional[str] = None) -> AppError:
    """Translate a storage-layer exception into the application error taxonomy.

    Args:
        error: Exception raised by SQLAlchemy or the DBAPI driver
        context: Short description of the operation, used in the message

    Returns:
        The matching AppError instance (not raised)
    """
    if isinstance(error, AppError):
        return error

    prefix = f"{context}: " if context else ""
    message = _message(error) if isinstance(error, SQLAlchemyError) else str(error)
    details = {"original_error": message}

    if isinstance(error, SQLAlchemyError):
        code = _pgcode(error)
        if code in PG_ERROR_MAP:
            error_cls = PG_ERROR_MAP[code]
            return error_cls(f"{prefix}{error_cls.default_message}", details)
        if code in CONNECTION_ERROR_CODES:
            return DatabaseError(f"{prefix}Database connection error", details, status_code=503)

    # Drivers without SQLSTATE codes (sqlite) are classified by message
    lowered = message.lower()
    if isinstance(error, IntegrityError):
        if 'unique' in lowered or 'duplicate' in lowered:
            return DuplicateEntryError(f"{prefix}{DuplicateEntryError.default_message}", details)
        return ConstraintViolationError(f"{prefix}{ConstraintViolationError.default_message}", details)
    if isinstance(error, DataError):
        return ValidationError(f"{prefix}{ValidationError.default_message}", details)
    if isinstance(error, NoResultFound):
        return NotFoundError(f"{prefix}{NotFoundError.default_message}", details)
    if isinstance(error, (OperationalError, InterfaceError)):
        if 'no such table' in lowered:
            return NotFoundError(f"{prefix}{NotFoundError.default_message}", details)
        return DatabaseError(f"{prefix}Database connection error", details, status_code=503)
    if isinstance(error, ProgrammingError):
        return DatabaseError(f"{prefix}{DatabaseError.default_message}", details)

    logger.error(f"Unmapped database error {prefix}{type(error).__name__}: {message}")
    return DatabaseError(f"{prefix}{DatabaseError.default_message}", details)
