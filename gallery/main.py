"""
Gallery API

FastAPI application factory and entry point. Run with
``uvicorn gallery.main:create_app --factory`` or the ``gallery`` script.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.middleware.sessions import SessionMiddleware

from gallery.core.config import DEFAULT_SESSION_SECRET, Settings, get_settings
from gallery.core.errors import setup_exception_handlers
from gallery.core.logging import setup_logging
from gallery.core.middleware import BodySizeLimitMiddleware, log_requests
from gallery.models.database import init_db, make_engine
from gallery.routers import auth, categories, images
from gallery.services.credentials import CredentialStore
from gallery.services.keepalive import KeepAlive
from gallery.services.storage import create_storage


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    db = app.state.session_factory()
    try:
        admin = CredentialStore(db).bootstrap_admin(settings.admin_username, settings.admin_password)
        if admin is not None:
            logger.info("Seed account ready: {}", admin.username)
    finally:
        db.close()

    keepalive = None
    if settings.keepalive_enabled:
        keepalive = KeepAlive(settings.resolved_keepalive_url, settings.keepalive_interval_seconds)
        keepalive.start()

    logger.info("Gallery started with {} storage", app.state.storage.name)
    try:
        yield
    finally:
        if keepalive is not None:
            await keepalive.stop()
        app.state.engine.dispose()
        logger.info("Shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        settings = get_settings()

    setup_logging(settings.log_level)
    if settings.session_secret == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; using the built-in development secret")

    app = FastAPI(title="Gallery", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.session_factory = init_db(app.state.engine)
    app.state.storage = create_storage(settings)

    setup_exception_handlers(app)

    # Last added runs first: size check, then logging, then the session cookie
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_ttl_seconds,
        same_site="lax",
        https_only=settings.session_cookie_secure,
    )
    app.middleware("http")(log_requests)
    app.add_middleware(BodySizeLimitMiddleware, max_file_size=settings.max_upload_size_bytes)

    # include our routers
    app.include_router(auth.router)
    app.include_router(categories.router)
    app.include_router(images.router)

    # Front-end files, if the deployment ships them
    public_dir = Path(settings.public_dir)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="public")

    return app


def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "gallery.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
