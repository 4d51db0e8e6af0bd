"""Database engine and session setup."""

from functools import lru_cache

from sqlalchemy import Engine, create_engine

from catalog_index.catalog.models import Base
from catalog_index.config import settings


@lru_cache(maxsize=1)
def get_sync_engine() -> Engine:
    return create_engine(settings.postgres_url_sync, pool_pre_ping=True)


def init_db_sync(engine: Engine | None = None) -> None:
    """Create catalog tables if they do not exist."""
    Base.metadata.create_all(engine or get_sync_engine())
