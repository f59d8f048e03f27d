"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from templecms.api.v1.router import api_v1_router
from templecms.core.config import VERSION, settings
from templecms.core.exceptions import (
    ProblemDetailError,
    http_exception_handler,
    problem_detail_handler,
    validation_exception_handler,
)
from templecms.core.logging_config import configure_logging
from templecms.core.middleware.cors import get_cors_config
from templecms.core.middleware.request_id import RequestIdMiddleware
from templecms.db.session import async_session_factory
from templecms.services.bootstrap import ensure_default_admin

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    try:
        async with async_session_factory() as session:
            await ensure_default_admin(session)
            await session.commit()
    except SQLAlchemyError as exc:
        # Schema may not be migrated yet; the API still starts.
        logger.warning("Default admin bootstrap skipped: %s", exc)
    logger.info("%s API %s started (%s)", settings.ORG_NAME, VERSION, settings.ENVIRONMENT)
    yield


app = FastAPI(
    title="Temple CMS API",
    version=VERSION,
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Middleware (last added = first executed)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(CORSMiddleware, **get_cors_config())

# Exception handlers (RFC 7807)
app.add_exception_handler(ProblemDetailError, problem_detail_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Routes
app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)
