# pulsechat/main.py
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import create_async_engine

from pulsechat.api import conversations, invites, messages, search_history, users
from pulsechat.config import AppConfig
from pulsechat.domain.errors import DomainError, Unauthenticated
from pulsechat.infrastructure.database import create_database
from pulsechat.infrastructure.event_dispatcher import EventDispatcher
from pulsechat.infrastructure.event_handlers import EventHandlers
from pulsechat.infrastructure.redis_client import RedisClient
from pulsechat.infrastructure.security import SecurityService
from pulsechat.infrastructure.suggestion_client import SuggestionClient


class Application:
    def __init__(self, config: AppConfig):
        self.config = config
        self.logger = self.setup_logger()
        engine = create_async_engine(config.DATABASE_URL, echo=False)
        self.database = create_database(engine)
        self.redis_client = RedisClient(
            config.REDIS_HOST, config.REDIS_PORT, self.logger
        )
        self.event_dispatcher = EventDispatcher()
        self.security_service = SecurityService(config)
        self.suggestion_client = SuggestionClient(
            config.AI_SUGGEST_URL,
            timeout=config.AI_SUGGEST_TIMEOUT_SECONDS,
            context_limit=config.AI_SUGGEST_CONTEXT_LIMIT,
        )
        self.event_handlers = EventHandlers(self.redis_client)
        self.event_handlers.register_all(self.event_dispatcher)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.database.connect()
        await self.redis_client.connect()
        yield
        await self.database.disconnect()
        await self.redis_client.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("PulseChat")
        logger.setLevel(logging.INFO)

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{self.config.API_V1_STR}/openapi.json",
            lifespan=self.lifespan,
        )

        app.state.config = self.config
        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.suggestion_client = self.suggestion_client
        app.state.database = self.database
        app.state.logger = self.logger

        app.include_router(
            users.router, prefix=f"{self.config.API_V1_STR}/users", tags=["users"]
        )
        app.include_router(
            conversations.router,
            prefix=f"{self.config.API_V1_STR}/conversations",
            tags=["conversations"],
        )
        app.include_router(
            messages.router,
            prefix=f"{self.config.API_V1_STR}/messages",
            tags=["messages"],
        )
        app.include_router(
            invites.router,
            prefix=f"{self.config.API_V1_STR}/invites",
            tags=["invites"],
        )
        app.include_router(
            search_history.router,
            prefix=f"{self.config.API_V1_STR}/search-history",
            tags=["search-history"],
        )

        @app.exception_handler(DomainError)
        async def domain_exception_handler(request: Request, exc: DomainError):
            headers = None
            if isinstance(exc, Unauthenticated):
                headers = {"WWW-Authenticate": "Bearer"}
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "code": exc.code},
                headers=headers,
            )

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            self.logger.exception(
                f"Unhandled error on {request.method} {request.url.path}"
            )
            return JSONResponse(
                status_code=500,
                content={"message": f"An unexpected error occurred: {str(exc)}"},
            )

        @app.get("/")
        async def root():
            return {"message": f"Welcome to the {self.config.PROJECT_NAME}"}

        return app


def create():
    config = AppConfig()
    application = Application(config)
    app = application.create_app()
    application.logger.info("Application created and configured")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create(), host="127.0.0.1", port=8000)
