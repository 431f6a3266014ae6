# backend/rentdesk/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .domain.errors import WorkflowError
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.meta import router as meta_router
from .routers.applications import router as applications_router

API_PREFIX = "/api"

log = logging.getLogger("rentdesk.errors")


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


async def _workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    log.log(level, "%s: %s", exc.kind, exc.message, extra={"status": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="rentdesk",
        version=getattr(settings, "app_version", "dev"),
    )

    # Starlette runs the last-added middleware outermost: request id wraps logging.
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(WorkflowError, _workflow_error_handler)

    app.include_router(meta_router, prefix=API_PREFIX)
    app.include_router(applications_router, prefix=API_PREFIX)
    return app


app = create_app()
