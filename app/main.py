from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import logging

from app.core.config import get_settings
from app.core.logging_config import setup_logging
from app.dependencies import close_auth_client
from app.routers import agent_profile, property, verification, youtube

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info("Agent service starting (%s)", settings.ENVIRONMENT)
    yield
    await close_auth_client()


app = FastAPI(
    title="Agent Service",
    version="1.0.0",
    lifespan=lifespan,
)


# --- Error bodies are always {"message": ...} ---
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


# --- Register Routers ---
app.include_router(agent_profile.router)    # /api/agents/profile/*
app.include_router(property.router)         # /api/agents/properties/*
app.include_router(verification.router)     # /api/agents/verification/*
app.include_router(youtube.router)          # /api/agents/youtube/*


# --- Root health check ---
@app.get("/")
async def root():
    return {"message": "Agent Service is running"}
