"""Unit tests for the supplier stores and the store factory."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from supplierguard.data.factory import (
    StoreConfig,
    get_default_supplier_store,
    get_supplier_store,
    load_config,
    set_supplier_store,
)
from supplierguard.data.interfaces import ISupplierStore
from supplierguard.data.seed import sample_suppliers
from supplierguard.data.sources.memory import InMemorySupplierStore
from supplierguard.data.sources.sqlite import SQLiteSupplierStore
from supplierguard.exceptions import Conflict
from supplierguard.models.supplier import Country, SupplierQuery

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sqlite"])
def empty_store(request):
    if request.param == "memory":
        return InMemorySupplierStore()
    return SQLiteSupplierStore(":memory:")


@pytest.fixture
def suppliers(supplier_factory):
    rows = [
        ("S1", "Acme Corp", "20100000001", "Peru", 15_000_000),
        ("S2", "Beta Trading", "20100000002", "Chile", 2_500_000),
        ("S3", "Gamma Mining", "20100000003", "Peru", 40_000_000),
        ("S4", "Delta Foods", "20100000004", "Mexico", 800_000),
    ]
    result = []
    for index, (supplier_id, name, tax_id, country, revenue) in enumerate(rows):
        supplier = supplier_factory(
            supplier_id,
            legal_name=name,
            commercial_name=name.split()[0],
            tax_id=tax_id,
            email=f"info@{name.split()[0].lower()}.test",
            country=country,
            annual_revenue=revenue,
        )
        result.append(supplier.model_copy(update={"created_at": BASE_TIME + timedelta(days=index)}))
    return result


@pytest_asyncio.fixture
async def populated_store(empty_store, suppliers):
    for supplier in suppliers:
        await empty_store.add(supplier)
    return empty_store


class TestStoreOperations:
    """Tests shared by the in-memory and SQLite stores."""

    def test_implements_protocol(self, empty_store):
        assert isinstance(empty_store, ISupplierStore)

    @pytest.mark.asyncio
    async def test_add_and_get(self, empty_store, supplier):
        await empty_store.add(supplier)

        loaded = await empty_store.get_by_id(supplier.id)

        assert loaded is not None
        assert loaded.legal_name == "Acme Corp"
        assert loaded.country is Country.PERU
        assert loaded.created_at == supplier.created_at

    @pytest.mark.asyncio
    async def test_get_missing(self, empty_store):
        assert await empty_store.get_by_id("missing") is None
        assert await empty_store.get_by_tax_id("00000000000") is None

    @pytest.mark.asyncio
    async def test_get_by_tax_id(self, empty_store, supplier):
        await empty_store.add(supplier)

        loaded = await empty_store.get_by_tax_id("20123456789")

        assert loaded.id == supplier.id

    @pytest.mark.asyncio
    async def test_exists_by_tax_id_with_exclusion(self, empty_store, supplier):
        await empty_store.add(supplier)

        assert await empty_store.exists_by_tax_id(supplier.tax_id)
        assert not await empty_store.exists_by_tax_id(supplier.tax_id, exclude_id=supplier.id)
        assert not await empty_store.exists_by_tax_id("99999999999")

    @pytest.mark.asyncio
    async def test_update(self, empty_store, supplier):
        await empty_store.add(supplier)
        changed = supplier.model_copy(
            update={"legal_name": "Acme Corporation", "last_modified_at": BASE_TIME}
        )

        await empty_store.update(changed)

        loaded = await empty_store.get_by_id(supplier.id)
        assert loaded.legal_name == "Acme Corporation"
        assert loaded.last_modified_at == BASE_TIME

    @pytest.mark.asyncio
    async def test_delete(self, empty_store, supplier):
        await empty_store.add(supplier)

        assert await empty_store.delete(supplier.id) is True
        assert await empty_store.delete(supplier.id) is False
        assert await empty_store.count() == 0

    @pytest.mark.asyncio
    async def test_add_many_skips_taken_tax_ids(self, empty_store):
        seed = sample_suppliers()

        assert await empty_store.add_many(seed) == len(seed)
        assert await empty_store.add_many(sample_suppliers()) == 0
        assert await empty_store.count() == len(seed)

    @pytest.mark.asyncio
    async def test_list_all_most_recent_first(self, populated_store):
        items = await populated_store.list_all()
        assert [s.id for s in items] == ["S4", "S3", "S2", "S1"]

    @pytest.mark.asyncio
    async def test_health_check(self, empty_store):
        assert await empty_store.health_check() is True


class TestStoreFind:
    """Tests for filtering, sorting and paging."""

    @pytest.mark.asyncio
    async def test_default_order_is_last_activity_descending(self, populated_store):
        items, total = await populated_store.find(SupplierQuery())

        assert total == 4
        assert [s.id for s in items] == ["S4", "S3", "S2", "S1"]

    @pytest.mark.asyncio
    async def test_search_term_is_case_insensitive(self, populated_store):
        items, total = await populated_store.find(SupplierQuery(search_term="MINING"))

        assert total == 1
        assert items[0].id == "S3"

    @pytest.mark.asyncio
    async def test_search_matches_tax_id_and_email(self, populated_store):
        _, by_tax_id = await populated_store.find(SupplierQuery(search_term="0000002"))
        _, by_email = await populated_store.find(SupplierQuery(search_term="delta.test"))

        assert by_tax_id == 1
        assert by_email == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["%", "_", "Ac%", "A_me"])
    async def test_search_treats_wildcards_literally(self, populated_store, term):
        items, total = await populated_store.find(SupplierQuery(search_term=term))

        assert items == []
        assert total == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["ñandú", "ÑANDÚ", "Ñandú Exp"])
    async def test_search_folds_non_ascii_case(self, populated_store, supplier_factory, term):
        await populated_store.add(
            supplier_factory("S5", legal_name="Ñandú Exports", tax_id="20100000005")
        )

        items, total = await populated_store.find(SupplierQuery(search_term=term))

        assert total == 1
        assert items[0].id == "S5"

    @pytest.mark.asyncio
    async def test_country_filter(self, populated_store):
        items, total = await populated_store.find(SupplierQuery(country="peru"))

        assert total == 2
        assert {s.id for s in items} == {"S1", "S3"}

    @pytest.mark.asyncio
    async def test_revenue_range(self, populated_store):
        items, total = await populated_store.find(
            SupplierQuery(min_revenue=1_000_000, max_revenue=15_000_000)
        )

        assert total == 2
        assert {s.id for s in items} == {"S1", "S2"}

    @pytest.mark.asyncio
    async def test_sort_by_revenue_ascending(self, populated_store):
        items, _ = await populated_store.find(
            SupplierQuery(order_by="annualRevenue", ascending=True)
        )

        assert [s.id for s in items] == ["S4", "S2", "S1", "S3"]

    @pytest.mark.asyncio
    async def test_sort_by_legal_name_descending(self, populated_store):
        items, _ = await populated_store.find(SupplierQuery(order_by="legal_name"))

        assert [s.legal_name for s in items] == [
            "Gamma Mining",
            "Delta Foods",
            "Beta Trading",
            "Acme Corp",
        ]

    @pytest.mark.asyncio
    async def test_paging(self, populated_store):
        query = SupplierQuery(order_by="legal_name", ascending=True, page_number=2, page_size=3)

        items, total = await populated_store.find(query)

        assert total == 4
        assert [s.id for s in items] == ["S3"]

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, populated_store):
        items, total = await populated_store.find(SupplierQuery(page_number=5, page_size=10))

        assert items == []
        assert total == 4


class TestInMemoryStore:
    """Tests specific to the in-memory store."""

    @pytest.mark.asyncio
    async def test_seed(self):
        store = InMemorySupplierStore(seed=True)
        assert await store.count() == len(sample_suppliers())

    @pytest.mark.asyncio
    async def test_initial_suppliers(self, supplier):
        store = InMemorySupplierStore([supplier])
        assert await store.get_by_id(supplier.id) == supplier


class TestSQLiteStore:
    """Tests specific to the SQLite store."""

    @pytest.mark.asyncio
    async def test_persists_to_file(self, tmp_path, supplier):
        path = tmp_path / "suppliers.db"
        await SQLiteSupplierStore(path).add(supplier)

        reopened = SQLiteSupplierStore(path)

        loaded = await reopened.get_by_id(supplier.id)
        assert loaded.tax_id == supplier.tax_id
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_update_of_unknown_supplier_inserts(self, supplier):
        store = SQLiteSupplierStore(":memory:")

        await store.update(supplier)

        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_duplicate_tax_id_insert_raises_conflict(self, supplier, supplier_factory):
        store = SQLiteSupplierStore(":memory:")
        await store.add(supplier)

        with pytest.raises(Conflict, match=supplier.tax_id):
            await store.add(supplier_factory("S2", tax_id=supplier.tax_id))

        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_duplicate_tax_id_update_raises_conflict(self, supplier, supplier_factory):
        store = SQLiteSupplierStore(":memory:")
        await store.add(supplier)
        other = supplier_factory("S2", tax_id="20999999999")
        await store.add(other)

        with pytest.raises(Conflict):
            await store.update(other.model_copy(update={"tax_id": supplier.tax_id}))

        assert (await store.get_by_id("S2")).tax_id == "20999999999"


class TestStoreFactory:
    """Tests for store configuration and creation."""

    def test_memory_store(self):
        store = get_supplier_store(StoreConfig(type="memory", seed=False))
        assert isinstance(store, InMemorySupplierStore)

    def test_sqlite_store(self, tmp_path):
        store = get_supplier_store(StoreConfig(type="sqlite", sqlite_path=str(tmp_path / "s.db")))
        assert isinstance(store, SQLiteSupplierStore)

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown supplier store type"):
            get_supplier_store(StoreConfig(type="oracle"))

    def test_load_config_from_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "data-sources.yaml"
        config_file.write_text(
            "default: development\n"
            "environments:\n"
            "  development:\n"
            "    type: memory\n"
            "    seed: true\n"
            "  production:\n"
            "    type: sqlite\n"
            "    sqlite_path: ${SUPPLIER_DB}\n"
            "    seed: false\n"
        )
        monkeypatch.setenv("SUPPLIERGUARD_ENV", "production")
        monkeypatch.setenv("SUPPLIER_DB", "/var/lib/suppliers.db")

        config = load_config(config_file)

        assert config.type == "sqlite"
        assert config.sqlite_path == "/var/lib/suppliers.db"
        assert config.seed is False

    def test_unknown_environment_falls_back_to_defaults(self, tmp_path, monkeypatch):
        config_file = tmp_path / "data-sources.yaml"
        config_file.write_text("environments:\n  development:\n    type: sqlite\n")
        monkeypatch.setenv("SUPPLIERGUARD_ENV", "staging")

        assert load_config(config_file) == StoreConfig()

    def test_set_default_store(self, store):
        set_supplier_store(store)
        assert get_default_supplier_store() is store
