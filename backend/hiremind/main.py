import logging
from typing import Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .ai_services import CareerAIService
from .config import DEV_SESSION_SECRET, Settings
from .db import Base, make_engine, make_session_factory
from .errors import HireMindError
from .fallback import FallbackEngine
from .providers import TextProvider, build_providers
from .session_store import ResumeSessionStore
from . import models  # noqa: F401  (registers tables on Base)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def create_app(settings: Optional[Settings] = None,
               providers: Optional[Mapping[str, TextProvider]] = None) -> FastAPI:
    """Build the API. ``providers`` overrides the ones derived from settings (tests, custom backends)."""
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    app = FastAPI(title="HireMind API")
    app.state.settings = settings

    if providers is None:
        providers = build_providers(settings)
    engine = FallbackEngine(providers, settings.provider_priority)
    app.state.ai_service = CareerAIService(engine)
    logger.info(f"AI providers in priority order: {engine.configured() or 'none'}")

    db_engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=db_engine)
    app.state.resume_store = ResumeSessionStore(make_session_factory(db_engine), settings.session_ttl_seconds)

    if settings.session_secret == DEV_SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; using an insecure development secret")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="hiremind_session",
        max_age=settings.session_ttl_seconds,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HireMindError)
    async def hiremind_error_handler(request: Request, exc: HireMindError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {where + ': ' if where else ''}{first.get('msg', 'malformed body')}"
        return JSONResponse(status_code=400, content={"success": False, "message": message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})

    @app.get("/health")
    def health():
        return {"status": "OK", "message": "HireMind API is running"}

    from .api.routes_resume import router as resume_router
    from .api.routes_documents import router as documents_router
    app.include_router(resume_router)
    app.include_router(documents_router)

    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    uvicorn.run("hiremind.main:app", host=settings.host, port=settings.port)
