from fastapi import FastAPI
from contextlib import AsyncExitStack

from app.connections import mongo_lifespan, redis_lifespan
from app.api.errors import register_exception_handlers
from app.api.user import router as user_router
from app.api.exam import router as exam_router
from app.utils.base import StorageBackend
from app.utils.config import settings
from app.utils.logging import configure_logging


async def combined_lifespan(app: FastAPI):
    async with AsyncExitStack() as stack:
        if settings.storage_backend == StorageBackend.MONGO.value:
            await stack.enter_async_context(mongo_lifespan(app))
        await stack.enter_async_context(redis_lifespan(app))

        yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="MCQ Exams", version="0.1.0", lifespan=combined_lifespan)
    register_exception_handlers(app)

    app.include_router(user_router, prefix="/api/users")
    app.include_router(exam_router, prefix="/api/exams")
    return app


app = create_app()
