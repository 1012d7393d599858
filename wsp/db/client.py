"""
Data client used by the service layer.

    client = get_data_client()
    profiles = await client.table("profiles").select().execute()

The backend is picked once from settings.DATA_BACKEND: the hosted Postgres
database, or the JSON-file store for offline development.
"""

from functools import lru_cache

from wsp.config import settings
from wsp.db.local_store import LocalExecutor
from wsp.db.postgres import PostgresExecutor
from wsp.db.query import Executor, TableQuery
from wsp.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DataClient:
    def __init__(self, executor: Executor, backend: str):
        self.executor = executor
        self.backend = backend

    def table(self, name: str) -> TableQuery:
        return TableQuery(self.executor, name)

    @classmethod
    def local(cls, path=None, seed: bool = True) -> "DataClient":
        return cls(LocalExecutor(path, seed=seed), backend="local")

    @classmethod
    def postgres(cls) -> "DataClient":
        return cls(PostgresExecutor(), backend="postgres")


@lru_cache(maxsize=1)
def get_data_client() -> DataClient:
    """Process-wide client; also the FastAPI dependency that tests override."""
    if settings.DATA_BACKEND == "postgres":
        logger.info("Using hosted Postgres data backend")
        return DataClient.postgres()

    logger.info("Using local JSON data backend", path=settings.LOCAL_STORE_PATH)
    return DataClient.local(settings.LOCAL_STORE_PATH)
