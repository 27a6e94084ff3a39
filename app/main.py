from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1 import admin as admin_router
from app.api.v1 import departments as departments_router
from app.api.v1 import tickets as tickets_router
from app.config.db import check_db_connection, engine
from app.config.supabase import check_supabase_connection
from app.settings import settings
from app.utils.exceptions import HelpdeskError
from app.utils.logging_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    await check_db_connection()
    if settings.STORAGE_BACKEND == "supabase":
        await check_supabase_connection()
    logger.info(f"Attachment storage backend: {settings.STORAGE_BACKEND}")

    yield

    await engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="University Helpdesk",
    description="An API for routing and tracking student support tickets",
)


@app.exception_handler(HelpdeskError)
async def helpdesk_error_handler(request: Request, exc: HelpdeskError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500, content={"detail": "Internal server error. Please try again later."}
    )


# Include routers
app.include_router(tickets_router.router, prefix="/api/v1/tickets", tags=["Tickets"])
app.include_router(
    departments_router.router, prefix="/api/v1/departments", tags=["Departments"]
)
app.include_router(admin_router.router, prefix="/api/v1/admin", tags=["Admin"])


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": "University Helpdesk API is running"}
