import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from newsroom.database import Base, engine
from newsroom.errors import install_error_handlers
from newsroom.routes import articles, bookmarks, newsletters, users

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    logger.info("Creating database tables if they don't exist...")
    Base.metadata.create_all(bind=engine)

    yield

    # --- Shutdown ---
    logger.info("Disposing database engine...")
    engine.dispose()


app = FastAPI(
    title="Newsroom API",
    description="Personalized news: interests, bookmarks, recommendations and engagement analytics.",
    version="1.0.0",
    lifespan=lifespan,
)

install_error_handlers(app)

app.include_router(articles.router)
app.include_router(users.router)
app.include_router(bookmarks.router)
app.include_router(newsletters.router)
