from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import init_models
from app.api.v1.routes.project import router as project_router
from app.api.v1.routes.expense import router as expense_router
from app.api.v1.routes.category import router as category_router
from app.api.v1.routes.balances import router as balances_router
from app.api.v1.routes.stats import router as stats_router
from app.api.v1.routes.split import router as split_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info("startup", app=settings.APP_NAME)
    yield


def create_app(lifespan=lifespan) -> FastAPI:
    configure_logging()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} is live"}

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path, method=request.method)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(project_router, prefix="/api/v1/projects")
    app.include_router(balances_router, prefix="/api/v1/projects")
    app.include_router(stats_router, prefix="/api/v1/projects")
    app.include_router(expense_router, prefix="/api/v1")
    app.include_router(category_router, prefix="/api/v1")
    app.include_router(split_router, prefix="/api/v1/splits")

    return app


app = create_app()
