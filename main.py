from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from secure import Secure
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from db import init_db, check_connection
from auth_routes import router as auth_router
from user_routes import router as user_router
from utils.email_service import Mailer
from utils.errors import AppError
from utils.responses import success, error

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

secure_headers = Secure.with_default_headers()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if check_connection():
        logger.info("Connected to database successfully")
    else:
        logger.error("Server is running but database connection failed; check DATABASE_URL")
    if getattr(app.state, "mailer", None) is None:
        app.state.mailer = Mailer()
    yield
    logger.info("Shutting down")


def create_app(mailer: Mailer | None = None) -> FastAPI:
    app = FastAPI(title=f"{config.APP_NAME} API", lifespan=lifespan)
    if mailer is not None:
        app.state.mailer = mailer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def set_secure_headers(request: Request, call_next):
        response = await call_next(request)
        await secure_headers.set_headers_async(response)
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return error(exc.message, status_code=exc.status_code, details=exc.category)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error("Invalid request body", status_code=400, details="ValidationError")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error(f"Route {request.url.path} not found", status_code=404, details="NotFoundError")
        return error(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error("Internal server error", status_code=500, details="InternalError")

    @app.get("/", tags=["meta"], summary="Welcome")
    def root():
        return success(f"Welcome to {config.APP_NAME} Backend API")

    @app.get(f"{config.API_PREFIX}/health", tags=["meta"], summary="Health check")
    def health():
        return success("API is operational", data={"timestamp": datetime.now(timezone.utc).isoformat()})

    app.include_router(auth_router, prefix=config.API_PREFIX)
    app.include_router(user_router, prefix=config.API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
