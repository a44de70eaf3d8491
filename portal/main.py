from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
import logging

from portal.api.v1 import routers
from portal.core.config import settings
from portal.core.exceptions import BadRequestError
from portal.core.security import CredentialService
from portal.db.session import connect_db_pool, close_db_pool
from portal.schemas.common import error_messages

logging.basicConfig(level=settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.credentials = CredentialService.from_settings(settings)
    await connect_db_pool()
    yield
    await close_db_pool()

app = FastAPI(
    title="Applicant Portal API",
    description="Accounts, authentication and applicant profiles",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(routers.router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # unparseable JSON and bad query/path params answer like every other BAD_REQUEST
    return await http_exception_handler(request, BadRequestError(", ".join(error_messages(exc))))


@app.get("/")
async def root():
    return {"message": "Welcome to Applicant Portal API"}
