#region imports
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from AppSettings import settings
from Helper.LoggingHelper import setup_logging
from Helper.ValidationHelper import ReviewValidationError, ValidationHelper
from Repository.SqlAlchemySetup import SqlAlchemySetup

#endregion imports

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    sqlalchemy_setup = SqlAlchemySetup()
    await sqlalchemy_setup.create_async_tables()
    logger.info("Application startup completed")
    yield
    await sqlalchemy_setup.dispose()
    logger.info("Application shutdown completed")


fastapiapp = FastAPI(title="Book Reviews API", version="1.0.0", lifespan=lifespan)

fastapiapp.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@fastapiapp.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "{method} {path} -> unhandled error in {duration_ms}ms",
            method=request.method,
            path=request.url.path,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        raise
    logger.info(
        "{method} {path} -> {status_code} in {duration_ms}ms",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return response


@fastapiapp.exception_handler(ReviewValidationError)
async def review_validation_error_handler(request: Request, exc: ReviewValidationError):
    logger.warning("Rejected book review write: {errors}", errors=exc.errors)
    return JSONResponse(status_code=exc.status_code, content=exc.to_problem())


@fastapiapp.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][-1]) if error["loc"] else ""
        errors.setdefault(field, []).append(error["msg"])
    logger.warning("Malformed request to {path}: {errors}", path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationHelper.problem_details(errors, status.HTTP_400_BAD_REQUEST),
    )


@fastapiapp.get("/health")
async def health():
    return {"status": "ok"}
