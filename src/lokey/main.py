from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

load_dotenv()

from lokey import __version__
from lokey.auth import AuthMiddleware
from lokey.config import Settings
from lokey.dependencies import close_clients
from lokey.errors import register_error_handlers
from lokey.logs import setup_logging
from lokey.routers import router as api_router
from lokey.routers.pages import STATIC_DIR, router as pages_router

logger = structlog.get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, production: bool = False):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Content-Security-Policy"] = "frame-ancestors 'self';"
        if self.production:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Clients are created lazily; release them on shutdown"""
    logger.info("startup", environment=app.state.settings.environment)
    yield
    logger.info("shutdown")
    await close_clients(app.state)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.service_name, settings.log_level, settings.log_format)

    app = FastAPI(
        title="Lokalise Translation Manager",
        description="AI-powered translation key management with Lokalise",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(AuthMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Outermost, so plain HTTP never reaches the auth gate
    if settings.is_production:
        app.add_middleware(HTTPSRedirectMiddleware)

    register_error_handlers(app)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": __version__,
        }

    app.include_router(api_router, prefix="/api")
    app.include_router(pages_router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


app = create_app()
