import logging

from fastapi import FastAPI

from meaningless.api.routes import router
from meaningless.catalog.singleton import init_catalog

app = FastAPI(title="meaningless", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    catalog = init_catalog()
    logger.info("Catalog loaded: %d words, %d concepts", len(catalog.words), len(catalog.education.concepts))


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "meaningless", "version": "0.1.0"}
