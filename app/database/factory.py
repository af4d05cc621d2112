from typing import ClassVar

from app.config.settings import Settings
from app.database.memory_store import InMemoryRecordStore
from app.database.postgres_store import PostgresRecordStore
from app.database.store import BaseRecordStore


class RecordStoreFactory:
    """Creates the configured record store."""

    ADAPTERS: ClassVar[dict[str, type[BaseRecordStore]]] = {
        "postgres": PostgresRecordStore,
        "memory": InMemoryRecordStore,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseRecordStore:
        """Create the store named by settings.record_store.

        The PostgreSQL store needs init_pool() to have been called first.
        """
        name = settings.record_store.lower()
        adapter_cls = cls.ADAPTERS.get(name)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown record store '{name}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
