"""FastAPI entry point for the agency application."""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app import __version__
from app.context import tracker
from app.database import init_db
from app.errors import AppError
from app.routers import analytics, auth, creators, dashboard, goals, monthly_financials, payments, sales, shifts, users
from app.schemas import HealthStatus

logging.basicConfig(
    level=os.getenv("AGENCY_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(title="Agency Desk", version=__version__, lifespan=lifespan)
app.state.tracker = tracker

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(creators.router)
app.include_router(sales.router)
app.include_router(monthly_financials.router)
app.include_router(payments.router)
app.include_router(goals.router)
app.include_router(shifts.router)
app.include_router(dashboard.router)
app.include_router(analytics.router)


@app.middleware("http")
async def track_in_flight(request: Request, call_next):
    with request.app.state.tracker.track():
        return await call_next(request)


@app.get("/health", response_model=HealthStatus)
def health(request: Request) -> HealthStatus:
    """Simple health endpoint for load balancers and platform checks."""
    return HealthStatus(status="ok", version=__version__, in_flight=request.app.state.tracker.in_flight)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    content = {"detail": exc.message}
    if exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s raised an unexpected error", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
