import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from config.database import build_engine, init_db
from config.mail import build_mail_config
from config.settings import Settings, load_settings
from middleware.request_logging import RequestLoggingMiddleware
from models.lcp_metric import LCPMetric
from models.performance_metric import PerformanceMetric
from routes.contact import contact_router
from routes.newsletter import newsletter_router
from routes.performance import performance_router
from utils.mailer import Mailer
from utils.persistence import PersistenceSink, SQLModelSink
from utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

HOUR = 60 * 60


def build_mailer(settings: Settings) -> Optional[Mailer]:
    if not settings.mail_enabled:
        logger.warning("SENDER_EMAIL/SENDER_PASSWORD not set, outgoing mail disabled")
        return None

    return Mailer(
        build_mail_config(settings),
        frontend_url=settings.frontend_url,
        contact_email=settings.contact_email,
        admin_email=settings.admin_email,
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    contact_engine: Optional[Engine] = None,
    sink: Optional[PersistenceSink] = None,
    mailer: Optional[Mailer] = None,
    create_tables: bool = True,
) -> FastAPI:
    """Build the application and every client it uses.

    Clients are created here once and shared through ``app.state``; pass
    your own to replace them (tests do).
    """
    settings = settings or load_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    if engine is None:
        engine = build_engine(settings.database_url, echo=settings.sql_echo)
    if contact_engine is None:
        if settings.contact_database_url:
            contact_engine = build_engine(
                settings.contact_database_url, echo=settings.sql_echo
            )
        else:
            contact_engine = engine

    app = FastAPI(title="Portfolio Site Backend")

    app.state.settings = settings
    app.state.engine = engine
    app.state.contact_engine = contact_engine
    app.state.sink = sink or SQLModelSink.for_models(
        engine, PerformanceMetric, LCPMetric
    )
    app.state.mailer = mailer if mailer is not None else build_mailer(settings)
    app.state.contact_limiter = RateLimiter(max_requests=5, window_seconds=HOUR)
    app.state.api_limiter = RateLimiter(max_requests=100, window_seconds=HOUR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(performance_router)
    app.include_router(contact_router)
    app.include_router(newsletter_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.on_event("startup")
    def prepare_database():
        if create_tables:
            init_db(app.state.engine, app.state.contact_engine)
            logger.info("Database tables are ready.")

    @app.on_event("shutdown")
    def dispose_engines():
        app.state.engine.dispose()
        if app.state.contact_engine is not app.state.engine:
            app.state.contact_engine.dispose()

    return app
