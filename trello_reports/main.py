import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from trello_reports.core.agent_provider import AgentProvider
from trello_reports.core.config import Settings, get_settings
from trello_reports.routes import auth, chat, reports

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting Trello reporting agent service")
        yield
        await run_in_threadpool(app.state.agent_provider.shutdown)
        logger.info("Shutdown complete")

    app = FastAPI(title="Trello Reports", version="1.0.0", lifespan=lifespan)
    app.state.agent_provider = AgentProvider(settings)

    app.add_middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET_KEY, session_cookie="trello-oauth")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, tags=["Auth"])
    app.include_router(reports.router, tags=["Reports"])
    app.include_router(chat.router, prefix="/api", tags=["Chat"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("trello_reports.main:app", host="0.0.0.0", port=5001)
