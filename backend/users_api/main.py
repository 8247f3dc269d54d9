import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from users_api.core.config import Settings, settings as default_settings
from users_api.db.session import Database
from users_api.routers import auth, health, users
from users_api.services.users import UserService
import users_api.models  # noqa: F401

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.api_title)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)

    @app.on_event("startup")
    async def _startup_database():
        database = Database(settings.database_url)
        await database.connect()
        await database.create_all()
        app.state.database = database
        app.state.user_service = UserService(database, bcrypt_rounds=settings.bcrypt_rounds)
        logger.info("%s started", settings.api_title)

    @app.on_event("shutdown")
    async def _shutdown_database():
        database = getattr(app.state, "database", None)
        if database:
            await database.disconnect()
        logger.info("%s stopped", settings.api_title)

    return app


app = create_app()
