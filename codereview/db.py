"""Database lifecycle for CodeReview: one Motor client and Beanie initialisation.

Repositories use the Beanie document classes directly, so the only global state here is
the client that Beanie was initialised with.
"""

from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from codereview.core import get_config, get_logger
from codereview.models.documents import DOCUMENT_MODELS

logger = get_logger("db")

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """
    Get the global Motor client, creating it on first call.

    Returns:
        AsyncIOMotorClient: Client bound to ``MONGO.URI``.
    """
    global _client
    if _client is None:
        cfg = get_config().MONGO
        _client = AsyncIOMotorClient(cfg.URI, serverSelectionTimeoutMS=cfg.TIMEOUT_MS, tz_aware=True)
    return _client


async def initialize_db() -> None:
    """
    Initialize Beanie against ``MONGO.DB`` and create the indexes declared on the documents.

    Should be called during application startup.
    """
    cfg = get_config().MONGO
    await init_beanie(database=get_client()[cfg.DB], document_models=DOCUMENT_MODELS)
    logger.info("database_initialized", db=cfg.DB)


async def close_db() -> None:
    """Close the database connection."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
