import logging
from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class NewsroomError(Exception):
    """Base class for errors surfaced by the service layer."""

    status_code = 500


class NotFound(NewsroomError):
    """A referenced article, user, bookmark or newsletter does not exist."""

    status_code = 404


class InvalidInput(NewsroomError):
    """Malformed category, keyword list, filter or paging argument."""

    status_code = 422


class StoreUnavailable(NewsroomError):
    """The backing store failed or timed out."""

    status_code = 503


@contextmanager
def store_call(db: Session, action: str):
    """
    Translate SQLAlchemy failures into StoreUnavailable.

    The session is rolled back so the caller's next statement starts clean.
    NewsroomErrors raised inside the block pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[store] {action} failed: {e}")
        raise StoreUnavailable(f"{action} failed") from e


async def _handle_newsroom_error(request: Request, exc: NewsroomError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def install_error_handlers(app: FastAPI) -> None:
    """Map the service error hierarchy onto HTTP responses."""
    app.add_exception_handler(NewsroomError, _handle_newsroom_error)
