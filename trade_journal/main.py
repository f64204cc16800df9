import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from trade_journal.config import Settings
from trade_journal.models.database import Base, create_engine, create_session_factory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Settings store
    engine = create_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.engine = engine
    app.state.async_session = create_session_factory(engine)
    app.state.settings = settings

    logger.info("Trade Journal started (store=%s)", settings.database_url)
    yield

    await engine.dispose()
    logger.info("Trade Journal shut down")


app = FastAPI(title="Trade Journal", version="1.0.0", lifespan=lifespan)

from trade_journal.api.router import api_router  # noqa: E402

app.include_router(api_router)
