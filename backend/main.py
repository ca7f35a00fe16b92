import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api.router import limiter, router
from config import settings
from database import Database
from services.esco_client import EscoApiError, EscoClient
from services.exceptions import (
    EmailAlreadyRegisteredException,
    EmptyProfileException,
    JobPostingNotFoundException,
    SeekerNotFoundException,
    ServiceException,
)
from services.gemini_client import GeminiClient

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = Database(settings.database_url)
    db.create_all()
    app.state.db = db
    app.state.esco = EscoClient()
    app.state.gemini = GeminiClient()
    try:
        yield
    finally:
        app.state.esco.close()
        db.dispose()


app = FastAPI(
    title="TalentBridge API",
    description="Skills-taxonomy matching between job seekers and job postings",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_STATUS_CODES: dict[type[ServiceException], int] = {
    SeekerNotFoundException: 404,
    JobPostingNotFoundException: 404,
    EmptyProfileException: 422,
    EmailAlreadyRegisteredException: 409,
}

_MESSAGES: dict[type[ServiceException], str] = {
    SeekerNotFoundException: "Seeker not found",
    JobPostingNotFoundException: "Job posting not found",
    EmailAlreadyRegisteredException: "Email already registered",
}


@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.error("Service error in %s: %s", request.url.path, exc, exc_info=True)
    detail = _MESSAGES.get(type(exc), str(exc))
    return JSONResponse(status_code=status_code, content={"detail": detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(EscoApiError)
async def esco_exception_handler(request: Request, exc: EscoApiError) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"detail": "ESCO resource not found"})
    logger.error("Taxonomy API error in %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "ESCO taxonomy lookup failed"})


app.include_router(router)
