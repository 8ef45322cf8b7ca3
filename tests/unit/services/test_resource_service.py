"""Unit tests for the ResourceService."""

from pydantic import ValidationError
import pytest

from carsonrent.models.base import EntityModel
from carsonrent.models.car import Car
from carsonrent.models.definitions import CAR
from carsonrent.models.page import Page, PageRequest
from carsonrent.services.resource import IndexHealth, ReindexResult, ResourceService


class FakeEntityStore:
    """In-memory fake EntityStore for testing."""

    def __init__(self) -> None:
        self.entities: dict[int, EntityModel] = {}
        self.initialized = False
        self._next_id = 1

    async def initialize_schema(self) -> None:
        self.initialized = True

    async def save(self, entity: EntityModel) -> EntityModel:
        if entity.id is None:
            entity = entity.with_id(self._next_id)
            self._next_id += 1
        self.entities[entity.id] = entity
        return entity

    async def find_by_id(self, entity_id: int) -> EntityModel | None:
        return self.entities.get(entity_id)

    async def find_page(self, page_request: PageRequest) -> Page:
        ordered = [self.entities[key] for key in sorted(self.entities)]
        start = page_request.offset
        return Page(
            content=ordered[start : start + page_request.size],
            page=page_request.page,
            size=page_request.size,
            total_elements=len(ordered),
        )

    async def delete(self, entity_id: int) -> bool:
        return self.entities.pop(entity_id, None) is not None

    async def count(self) -> int:
        return len(self.entities)


class FakeSearchIndex:
    """In-memory fake SearchIndex for testing."""

    def __init__(self) -> None:
        self.documents: dict[int, EntityModel] = {}
        self.initialized = False
        self.cleared = 0
        self.fail_next_index = False

    async def initialize(self) -> None:
        self.initialized = True

    async def index(self, entity: EntityModel) -> None:
        if self.fail_next_index:
            self.fail_next_index = False
            raise ConnectionError("search index unavailable")
        self.documents[entity.id] = entity

    async def delete(self, entity_id: int) -> None:
        self.documents.pop(entity_id, None)

    async def search(self, query: str, page_request: PageRequest) -> Page:
        matches = [
            self.documents[key] for key in sorted(self.documents) if query.lower() in self.documents[key].searchable_text()
        ]
        return Page(content=matches, page=page_request.page, size=page_request.size, total_elements=len(matches))

    async def clear(self) -> None:
        self.cleared += 1
        self.documents.clear()

    async def count(self) -> int:
        return len(self.documents)


def _make_car(brand: str = "Toyota", license_plate: str = "AB-1") -> Car:
    return Car(brand=brand, model="Corolla", license_plate=license_plate)


@pytest.fixture
def fake_entity_store() -> FakeEntityStore:
    return FakeEntityStore()


@pytest.fixture
def fake_search_index() -> FakeSearchIndex:
    return FakeSearchIndex()


@pytest.fixture
def service(fake_entity_store: FakeEntityStore, fake_search_index: FakeSearchIndex) -> ResourceService:
    """Create a ResourceService with fake dependencies."""
    return ResourceService(
        definition=CAR,
        entity_store=fake_entity_store,
        search_index=fake_search_index,
    )


class TestResourceServiceInitialization:
    """Tests for ResourceService wiring."""

    def test_accepts_all_dependencies(
        self,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        service = ResourceService(definition=CAR, entity_store=fake_entity_store, search_index=fake_search_index)

        assert service.definition is CAR
        assert service._entity_store is fake_entity_store
        assert service._search_index is fake_search_index

    async def test_initialize_initializes_both_stores(
        self,
        service: ResourceService,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        await service.initialize()

        assert fake_entity_store.initialized
        assert fake_search_index.initialized


class TestResourceServiceWrites:
    """Tests for the dual write to store and index."""

    async def test_save_persists_and_indexes(
        self,
        service: ResourceService,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        saved = await service.save(_make_car())

        assert saved.id is not None
        assert fake_entity_store.entities[saved.id] == saved
        assert fake_search_index.documents[saved.id] == saved

    async def test_update_replaces_indexed_copy(
        self,
        service: ResourceService,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        saved = await service.save(_make_car(brand="Toyota"))

        updated = await service.save(saved.model_copy(update={"brand": "Lexus"}))

        assert fake_search_index.documents[saved.id] == updated
        assert fake_search_index.documents[saved.id].brand == "Lexus"

    async def test_index_failure_propagates_and_store_keeps_change(
        self,
        service: ResourceService,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        fake_search_index.fail_next_index = True

        with pytest.raises(ConnectionError):
            await service.save(_make_car())

        assert len(fake_entity_store.entities) == 1
        assert fake_search_index.documents == {}

    async def test_delete_removes_from_both_stores(
        self,
        service: ResourceService,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        saved = await service.save(_make_car())

        await service.delete(saved.id)

        assert saved.id not in fake_entity_store.entities
        assert saved.id not in fake_search_index.documents

    async def test_delete_unknown_id_is_not_an_error(self, service: ResourceService) -> None:
        await service.delete(999)  # Should not raise

        assert await service.find_one(999) is None


class TestResourceServiceReads:
    """Tests for reads delegated to the store and the index."""

    async def test_find_one(self, service: ResourceService) -> None:
        saved = await service.save(_make_car())

        assert await service.find_one(saved.id) == saved

    async def test_find_all_pages(self, service: ResourceService) -> None:
        for i in range(3):
            await service.save(_make_car(license_plate=f"P-{i}"))

        page = await service.find_all(PageRequest(page=0, size=2))

        assert len(page.content) == 2
        assert page.total_elements == 3

    async def test_search_uses_index(self, service: ResourceService, fake_entity_store: FakeEntityStore) -> None:
        await service.save(_make_car(brand="Toyota", license_plate="T-1"))
        await service.save(_make_car(brand="Renault", license_plate="R-1"))

        page = await service.search("renault", PageRequest())

        assert [car.brand for car in page.content] == ["Renault"]


class TestResourceServiceReindex:
    """Tests for rebuilding the index from the store."""

    async def test_reindex_repairs_divergence(
        self,
        service: ResourceService,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        fake_search_index.fail_next_index = True
        with pytest.raises(ConnectionError):
            await service.save(_make_car(brand="Skoda"))
        assert (await service.search("skoda", PageRequest())).content == []

        result = await service.reindex()

        assert result == ReindexResult(entity_name="car", indexed=1)
        assert [car.brand for car in (await service.search("skoda", PageRequest())).content] == ["Skoda"]

    async def test_reindex_pages_through_store(
        self,
        service: ResourceService,
        fake_entity_store: FakeEntityStore,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        for i in range(5):
            await fake_entity_store.save(_make_car(license_plate=f"P-{i}"))

        result = await service.reindex(batch_size=2)

        assert result.indexed == 5
        assert sorted(fake_search_index.documents) == sorted(fake_entity_store.entities)
        assert fake_search_index.cleared == 1

    async def test_reindex_drops_orphaned_documents(
        self,
        service: ResourceService,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        await fake_search_index.index(_make_car().with_id(77))

        result = await service.reindex()

        assert result.indexed == 0
        assert fake_search_index.documents == {}


class TestResourceServiceIndexHealth:
    """Tests for comparing store and index sizes."""

    async def test_in_sync_after_writes(self, service: ResourceService) -> None:
        await service.save(_make_car(license_plate="H-1"))
        await service.save(_make_car(license_plate="H-2"))

        health = await service.index_health()

        assert health == IndexHealth(entity_name="car", stored=2, indexed=2)
        assert health.in_sync

    async def test_failed_index_write_shows_as_drift_until_reindex(
        self,
        service: ResourceService,
        fake_search_index: FakeSearchIndex,
    ) -> None:
        fake_search_index.fail_next_index = True
        with pytest.raises(ConnectionError):
            await service.save(_make_car())

        drifted = await service.index_health()
        await service.reindex()
        repaired = await service.index_health()

        assert (drifted.stored, drifted.indexed, drifted.in_sync) == (1, 0, False)
        assert repaired.in_sync


def test_result_models_are_frozen() -> None:
    result = ReindexResult(entity_name="car", indexed=1)
    health = IndexHealth(entity_name="car", stored=1, indexed=1)

    with pytest.raises(ValidationError):
        result.indexed = 2
    with pytest.raises(ValidationError):
        health.stored = 5
