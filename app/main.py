import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from database.connection import init_db
from app.api import api_router
from app.core.config import get_settings
from app.services.certificate_manager import check_signing_configuration
from app.services.messages import load_catalogs

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: fail on broken catalogs, warn on missing storage or signing config
    load_catalogs()
    init_db()
    check_signing_configuration(get_settings())
    yield
    # Shutdown


def create_app() -> FastAPI:
    app = FastAPI(
        title="Business Card Pass",
        description="Collects meeting details and issues Apple Wallet business cards",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
