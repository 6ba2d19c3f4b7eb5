import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from prepgames.api.router import router
from prepgames.core.config import settings
from prepgames.core.exceptions import (
    CategoryBlockedError,
    GameError,
    GameStateError,
    InvalidRequestError,
    RepositoryError,
)
from prepgames.core.logging_setup import setup_logging
from prepgames.db.database import init_db

logger = logging.getLogger(__name__)

# Most specific first: the first matching class wins
ERROR_STATUS: list[tuple[type[GameError], int]] = [
    (RepositoryError, status.HTTP_404_NOT_FOUND),
    (CategoryBlockedError, status.HTTP_403_FORBIDDEN),
    (GameStateError, status.HTTP_409_CONFLICT),
    (InvalidRequestError, status.HTTP_422_UNPROCESSABLE_CONTENT),
]


# --- Error handling ---
async def game_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# --- App Factory ---
def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan,
        root_path=settings.ROOT_PATH,
    )
    app.add_exception_handler(GameError, game_error_handler)
    app.include_router(router)

    return app
