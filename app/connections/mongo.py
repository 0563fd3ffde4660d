import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import certifi
from fastapi import FastAPI
from mongoengine import connect, disconnect

from app.utils.config import settings


logger = logging.getLogger(__name__)


def init_mongo() -> None:
    options = {"tlsCAFile": certifi.where()} if settings.mongo_srv else {}
    connect(host=settings.mongo_uri, alias="default", tz_aware=True, **options)
    logger.info("Connected to Mongo database %s", settings.mongo_db)


def ensure_indexes() -> None:
    # Submission uniqueness must exist before the first insert is accepted
    from app.models.submission import Submission
    from app.models.test import Test
    from app.models.user import User

    for document in (User, Test, Submission):
        document.ensure_indexes()


def close_mongo() -> None:
    disconnect(alias="default")


@asynccontextmanager
async def mongo_lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_mongo()
    ensure_indexes()
    try:
        yield
    finally:
        close_mongo()
