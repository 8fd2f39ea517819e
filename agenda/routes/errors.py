import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.core.errors import BusinessRuleError, DomainError, NotFoundError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def status_code_for(error: DomainError) -> int:
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, UnauthorizedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, BusinessRuleError) and error.code.endswith('_FORBIDDEN'):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, BusinessRuleError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(error: DomainError) -> HTTPException:
    return HTTPException(
        status_code=status_code_for(error),
        detail={'code': error.code, 'message': error.message},
    )


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE,
    )


@contextmanager
def request_transaction(db: Session) -> Iterator[None]:
    """Commit the request's unit of work, or roll it back and translate the error."""
    try:
        yield
        db.commit()
    except DomainError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while handling request')
        raise database_unavailable() from exc
    except Exception:
        db.rollback()
        raise
