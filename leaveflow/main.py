import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select, text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from leaveflow.api.v1.endpoints.admin import router as admin_router
from leaveflow.api.v1.endpoints.auth import router as auth_router
from leaveflow.api.v1.endpoints.leaverequests import router as leave_requests_router
from leaveflow.constants.constants import ROLE_IDS, RoleName
from leaveflow.core.config import settings
from leaveflow.core.database import get_db, seed_roles, session_manager
from leaveflow.core.exceptions import LeaveflowError
from leaveflow.core.rate_limit import build_limiter, enforce_rate_limit, parse_rate_limit
from leaveflow.models.user import User
from leaveflow.services.UserManagementService import UserManagementService
from leaveflow.utils.logger import log_client_error

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)
limiter = build_limiter()


def seed_reference_data():
    """Seed roles and, when configured, the first admin account."""
    with session_manager.get_session() as db:
        seed_roles(db)
        db.commit()

        email = settings.INITIAL_ADMIN_EMAIL
        password = settings.INITIAL_ADMIN_PASSWORD
        if not (email and password):
            return
        if db.execute(select(User.user_id).where(User.email == email)).first():
            return
        UserManagementService(db).add_user(
            firstname="System",
            surname="Admin",
            email=email,
            password=password,
            role_id=ROLE_IDS[RoleName.admin],
            department="Administration",
        )
        logger.info(f"Seeded initial admin {email}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async context manager for app lifespan events"""
    try:
        logger.info("Starting Leaveflow application...")
        session_manager.init()
        logger.info("Database ready")
        if settings.SEED_ON_STARTUP:
            seed_reference_data()
    except Exception as e:
        logger.critical(f"Application startup failed: {str(e)}")
        raise

    try:
        yield
    finally:
        logger.info("Closing database connections...")
        session_manager.close()
        logger.info("Application shutdown complete")


app = FastAPI(
    title="Leaveflow API",
    description="Role-based leave management API",
    version="1.0.0",
    lifespan=lifespan,
    dependencies=[Depends(enforce_rate_limit)],
)

app.state.limiter = limiter
app.state.rate_limit = parse_rate_limit()


@app.exception_handler(LeaveflowError)
async def leaveflow_exception_handler(request: Request, exc: LeaveflowError):
    log_client_error(
        exc.status_code,
        exc.message,
        request.url.path,
        request.method,
        getattr(request.state, "user_id", None),
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    log_client_error(400, message, request.url.path, request.method, getattr(request.state, "user_id", None))
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    log_client_error(exc.status_code, message, request.url.path, request.method)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response status: {response.status_code}")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/", tags=["Health Check"])
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "service": "Leaveflow API",
            "database": "connected",
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "service": "Leaveflow API",
            "database": "disconnected",
            "error": str(e),
        }


app.include_router(auth_router, prefix="/api", tags=["Authentication"])
app.include_router(leave_requests_router, prefix="/api", tags=["Leave Requests"])
app.include_router(admin_router, prefix="/api", tags=["Admin"])

logger.info(f"Loaded {len(app.routes)} routes")


def run():
    import uvicorn

    uvicorn.run("leaveflow.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
