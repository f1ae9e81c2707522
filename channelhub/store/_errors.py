"""SQLAlchemy exception translation shared by the stores."""

from __future__ import annotations

from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from channelhub.core.errors import DataAlreadyExists, DataInternalError


@asynccontextmanager
async def translate_db_errors():
    """Turn driver/ORM failures into store errors.

    Unique and primary key violations become ``DataAlreadyExists``; anything
    else SQLAlchemy raises becomes ``DataInternalError``.
    """
    try:
        yield
    except IntegrityError as exc:
        raise DataAlreadyExists(str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        raise DataInternalError(str(exc)) from exc
