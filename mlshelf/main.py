# mlshelf/main.py
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from . import deps
from .api.v1 import auth, health, models
from .core.config import Settings, get_settings
from .core.log_config import configure_logging
from .web import pages

OPEN_PATHS = ("/health", "/v1/health")


class ConfigurationRequiredMiddleware(BaseHTTPMiddleware):
    """Answer every request with the configuration screen while the backend settings are missing."""

    async def dispatch(self, request, call_next):
        if request.url.path in OPEN_PATHS:
            return await call_next(request)
        if request.url.path.startswith("/v1/"):
            return JSONResponse(
                status_code=503,
                content={"detail": "Backend connection is not configured"},
            )
        return pages.render(request, "config_required.html", status_code=503)


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Send renewed session tokens back to the browser.

    Routes that set or clear the cookies themselves are left alone.
    """

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        if "set-cookie" in response.headers:
            return response
        ctx = getattr(request.state, "session_context", None)
        session = deps.rotated_session(request, ctx)
        if session is not None:
            logger.debug("Session renewed for user {}", ctx.user_id)
            deps.set_session_cookies(response, session, request.app.state.settings)
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title=settings.APP_NAME, version="1.0.0")
    app.state.settings = settings
    app.add_middleware(SessionCookieMiddleware)

    if not settings.is_configured:
        logger.error("Missing Supabase environment variables. Please connect to Supabase.")
        app.add_middleware(ConfigurationRequiredMiddleware)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(health.router, prefix="/v1/health", tags=["health"])
    app.include_router(auth.router, prefix="/v1/auth", tags=["auth"])
    app.include_router(models.router, prefix="/v1/models", tags=["models"])
    app.include_router(pages.router, include_in_schema=False)

    logger.info("{} started (env={})", settings.APP_NAME, settings.ENV)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
