import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from fintrack.api.api import api_router
from fintrack.api.deps import get_gateway
from fintrack.core.config import settings
from fintrack.core.errors import FinTrackError
from fintrack.core.logging import configure_logging
from fintrack.db.mongo import connect_to_mongo, disconnect_from_mongo
from fintrack.repositories.base import CollectionGateway
from fintrack.schemas.stats import HealthResponse

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.PERSISTENCE_BACKEND == "mongo":
        await connect_to_mongo()
    yield
    await disconnect_from_mongo()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FinTrackError)
async def fintrack_error_handler(request: Request, exc: FinTrackError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"] if p != "body")
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    return {"message": "Welcome to FinTrack API"}


@app.get("/health", response_model=HealthResponse)
async def health(gateway: CollectionGateway = Depends(get_gateway)):
    """Liveness plus a live ping of the persistence backend"""
    connected = await gateway.ping()
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        database="Connected" if connected else "Disconnected"
    )


app.include_router(api_router, prefix=settings.API_PREFIX)
