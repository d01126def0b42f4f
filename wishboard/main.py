from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wishboard.core.config import Settings, settings as default_settings
from wishboard.core.errors import (
    WishboardError,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
    wishboard_exception_handler,
)
from wishboard.core.log import configure_logging
from wishboard.deps import get_store
from wishboard.routers import comments as comments_router
from wishboard.routers import entries as entries_router
from wishboard.routers import reactions as reactions_router
from wishboard.routers import uploads as uploads_router
from wishboard.routers import users as users_router
from wishboard.schemas.common import Envelope
from wishboard.services.uploads import ObjectStoreUploader
from wishboard.stores import BoardStore, build_store

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BoardStore] = None,
    uploader: Optional[ObjectStoreUploader] = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        board_store = store or build_store(settings)
        board_store.open()
        app.state.store = board_store
        app.state.uploader = uploader or ObjectStoreUploader.from_settings(settings)
        logger.info("Board started (env=%s, store=%s)", settings.APP_ENV, board_store.name)
        try:
            yield
        finally:
            board_store.close()
            logger.info("Board stopped")

    app = FastAPI(
        title="Memories & Wishes Board API",
        description=(
            "Two-user board of **memories** (past year) and **wishes** (next year) "
            "with photos, time locks, emoji reactions and comments.\n\n"
            "All responses follow the `{success, data?, error?}` envelope."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers (most specific first) ---
    app.add_exception_handler(WishboardError, wishboard_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --- Routers ---
    app.include_router(users_router.router)
    app.include_router(entries_router.router)
    app.include_router(reactions_router.router)
    app.include_router(comments_router.router)
    app.include_router(uploads_router.router)

    @app.get("/health", tags=["health"], summary="Health check")
    async def health(board_store: BoardStore = Depends(get_store)):
        """
        `{"success": true, "data": {"status": "ok", ...}}` when both the API and
        the storage backend are reachable; HTTP 503 with the error envelope
        (`STORE_UNREACHABLE`) otherwise.
        """
        async with board_store.guard():
            reachable = await run_in_threadpool(board_store.ping)
        if not reachable:
            return JSONResponse(
                status_code=503,
                content={
                    "success": False,
                    "error": "Storage backend is unreachable.",
                    "code": "STORE_UNREACHABLE",
                    "details": {"backend": board_store.name},
                },
            )
        return Envelope[dict](
            data={"status": "ok", "store": "ok", "backend": board_store.name, "env": settings.APP_ENV}
        )

    return app


app = create_app()
