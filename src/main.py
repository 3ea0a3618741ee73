import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.database import prisma
from src.core.logging import configure_logging
from src.core.settings import settings
from src.domains.auth.routes import router as auth_router
from src.domains.bugs.routes import router as bugs_router
from src.domains.projects.routes import router as projects_router
from src.domains.test_runs.routes import router as test_runs_router
from src.shared.exceptions import ServiceUnavailableError
from src.shared.permissions import AuthorizationError, MembershipLookupError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    configure_logging(settings.LOG_LEVEL)
    await prisma.connect()
    yield
    # Shutdown
    await prisma.disconnect()


app = FastAPI(
    title="QA Manager API",
    description="API for the QA manager application",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(
    request: Request, exc: AuthorizationError
) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(MembershipLookupError)
async def membership_lookup_error_handler(
    request: Request, exc: MembershipLookupError
) -> JSONResponse:
    logger.error("Permission check failed for %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"message": ServiceUnavailableError.message},
    )


# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(bugs_router, prefix="/api/v1")
app.include_router(projects_router, prefix="/api/v1")
app.include_router(test_runs_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "QA Manager API is running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}
