import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError
from starlette.middleware.cors import CORSMiddleware

from filmorate.catalog.router import router as catalog_router
from filmorate.catalog.service import seed_reference_catalog
from filmorate.config import Settings, settings as default_settings
from filmorate.database import create_engine, create_session_maker, create_tables
from filmorate.dependencies import build_services
from filmorate.exception import FilmorateException, IntegrityException, InternalException
from filmorate.films.router import router as film_router
from filmorate.stats.router import router as stats_router
from filmorate.users.router import router as user_router


async def handle_filmorate_exception(request: Request, exc: FilmorateException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.detail}")
    return await http_exception_handler(request, exc)


async def handle_integrity_error(request: Request, exc: IntegrityError):
    logger.warning(f"Ошибка целостности данных: {exc.orig}")
    return await handle_filmorate_exception(request, IntegrityException())


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Внутренняя ошибка: {exc!r}")
    error = InternalException()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.remove()
        logger.add(sys.stderr, level=settings.LOG_LEVEL)

        engine = None
        session_maker = None
        if settings.STORAGE == "database":
            engine = create_engine(settings.DB_URL)
            await create_tables(engine)
            session_maker = create_session_maker(engine)
            await seed_reference_catalog(session_maker)

        app.state.services = await build_services(settings, session_maker)
        logger.info("Filmorate запущен...")
        yield
        logger.info("Filmorate остановлен...")
        if engine is not None:
            await engine.dispose()

    app = FastAPI(title="Filmorate", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.add_exception_handler(FilmorateException, handle_filmorate_exception)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(film_router)
    app.include_router(user_router)
    app.include_router(catalog_router)
    app.include_router(stats_router)
    return app


app = create_app()

# uvicorn filmorate.main:app --reload
