import pytest

from app.config.settings import Settings
from app.database.factory import RecordStoreFactory
from app.database.memory_store import InMemoryRecordStore
from app.database.postgres_store import PostgresRecordStore


class TestRecordStoreFactory:
    def test_creates_memory_store(self) -> None:
        store = RecordStoreFactory.create(Settings(record_store="memory"))
        assert isinstance(store, InMemoryRecordStore)

    def test_creates_postgres_store(self) -> None:
        store = RecordStoreFactory.create(Settings(record_store="postgres"))
        assert isinstance(store, PostgresRecordStore)

    def test_name_is_case_insensitive(self) -> None:
        store = RecordStoreFactory.create(Settings(record_store="Memory"))
        assert isinstance(store, InMemoryRecordStore)

    def test_unknown_store_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown record store 'sqlite'"):
            RecordStoreFactory.create(Settings(record_store="sqlite"))
