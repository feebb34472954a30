from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tweetlate.api.routes import router
from tweetlate.core.errors import TweetlateError
from tweetlate.core.scheduler import WatchlistRefresher
from tweetlate.core.services import Services, build_services
from tweetlate.core.settings import Settings, get_settings


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Pass ``services`` to skip wiring from settings (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active_settings = settings or get_settings()
        app.state.services = services or build_services(active_settings)
        refresher = WatchlistRefresher(
            app.state.services.pipeline,
            active_settings.watchlist,
            interval_minutes=active_settings.watchlist_interval_minutes,
        )
        refresher.start()
        try:
            yield
        finally:
            refresher.stop()
            await app.state.services.close()

    app = FastAPI(
        title="tweetlate",
        description="Translated Twitter timelines served from a Redis cache",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(router)

    @app.exception_handler(TweetlateError)
    async def tweetlate_error_handler(request: Request, exc: TweetlateError):
        return JSONResponse(status_code=503, content=exc.as_dict())

    return app


load_dotenv()
app = create_app()
