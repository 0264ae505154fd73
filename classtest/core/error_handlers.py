"""Global handlers for errors that take over the whole application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from classtest.core import view_state
from classtest.core.exceptions import AuthNetworkBlocked, ConfigMissing, ServiceError

logger = logging.getLogger(__name__)


def _error_body(exc: ServiceError, view: view_state.ErrorState) -> dict:
    error = {"code": exc.code, "message": exc.message}
    if view.remediation:
        error["remediation"] = view.remediation
    return {"error": error, "view": view_state.describe(view)}


def add_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigMissing)
    async def config_missing_handler(request: Request, exc: ConfigMissing):
        logger.error("Store configuration missing: %s", ", ".join(exc.missing))
        view = view_state.fail(view_state.View.CONFIG_ERROR, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, view))

    @app.exception_handler(AuthNetworkBlocked)
    async def auth_network_blocked_handler(request: Request, exc: AuthNetworkBlocked):
        logger.error("Authentication blocked by network: %s", exc.detail)
        view = view_state.fail(view_state.View.AUTH_ERROR, exc.message, exc.remediation)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, view))

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": exc.code, "message": exc.message}},
        )
