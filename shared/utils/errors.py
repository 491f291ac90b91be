"""
shared/utils/errors.py
Catch boundary for database work inside a route.

A failed query or write is rolled back, logged, and re-raised as a 500
carrying a short message the console can show as-is.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def db_operation(db: AsyncSession, message: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(f"{message}: {exc}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)
