# main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from pymongo.errors import PyMongoError

from config import APP_NAME, APP_VERSION, APP_DESCRIPTION, CORS_ORIGINS, LOG_LEVEL
from database import ensure_indexes, ping_database
from routers import employee_router, attendance_router, leave_router, report_router
from utils.errors import InvalidArgumentError
from utils.logging_utils import configure_logging

configure_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await ensure_indexes()
    except PyMongoError:
        # The app still serves; /health reports the database as unreachable
        logger.exception("Failed to create database indexes")
    yield

app = FastAPI(title=APP_NAME, version=APP_VERSION, description=APP_DESCRIPTION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Month/year validation failures surface as a 400 with the standard envelope
@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    logger.warning("Invalid argument: %s", exc, extra={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.detail, extra={"path": request.url.path, "method": request.method, "status_code": exc.status_code})
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )

# Include your routers
app.include_router(employee_router.router)
app.include_router(attendance_router.router)
app.include_router(leave_router.router)
app.include_router(report_router.router)

@app.get("/")
def read_root():
    return {"message": f"Welcome to {APP_NAME}"}

@app.get("/health")
async def health():
    try:
        await ping_database()
    except PyMongoError as e:
        logger.exception("Database ping failed")
        return JSONResponse(status_code=503, content={"success": False, "error": str(e)})
    return {"success": True, "message": "Database connection OK"}

@app.get("/app_info")
def get_app_info():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
    }
