import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import TaskStoreError
from app.core.logging import setup_logging
from app.repositories.factory import build_repository
from app.routers import health, tasks
from app.services.task_service import TaskService

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task List API",
    version="0.1.0"
)

# Stockage choisi une seule fois pour toute la vie du process
app.state.task_service = TaskService(
    build_repository(settings),
    list_limit=settings.TASK_LIST_LIMIT
)


def cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


@app.middleware("http")
async def cors(request: Request, call_next):
    # Preflight navigateur : 204 vide, sans passer par les routes
    if request.method == "OPTIONS":
        response = Response(status_code=204)
    else:
        response = await call_next(request)
    response.headers.update(cors_headers())
    return response


# Erreurs -> {"error": "..."}

@app.exception_handler(TaskStoreError)
async def task_store_error_handler(request: Request, exc: TaskStoreError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail).lower()},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "internal error"}, headers=cors_headers())


# Routes
app.include_router(health.router, prefix="/health")
app.include_router(tasks.router, prefix="/tasks")
app.include_router(tasks.router, prefix="/.netlify/functions/tasks", include_in_schema=False)
