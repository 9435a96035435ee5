import json
from datetime import datetime, timezone

import pytest

from scan_engine import (
    CsvScanStore,
    CsvTriggerSource,
    InMemoryProductSource,
    InMemoryScanStore,
    InMemoryTriggerSource,
    InputType,
    ProductInfo,
    ScanEngine,
    ScanEvent,
    ScanLookupError,
    ScanPersistenceError,
    ScanRequest,
    TriggerDataError,
)
from scan_engine import db_repository
from scan_engine.db_repository import PostgresRepository
from scan_engine.openbeautyfacts_client import FallbackProductSource


def _event(user_id="u1", created_at=None, text="Fragrance"):
    return ScanEvent(
        id=None,
        user_id=user_id,
        input_type=InputType.PASTE,
        product_id=None,
        barcode=None,
        raw_ingredients_text=text,
        result_json={"riskScore": 28, "riskTier": "low", "flags": [], "summary": []},
        created_at=created_at,
    )


class TestCsvTriggerSource:
    def test_reads_pipe_separated_lists(self, trigger_csv):
        source = CsvTriggerSource(csv_path=str(trigger_csv))
        fragrance, coconut = source.fetch_all()

        assert fragrance.aliases == ("parfum", "perfume")
        assert fragrance.notes == "Common irritant."
        assert coconut.categories == ("comedogenic", "acne_trigger")
        assert coconut.severity == 3
        assert source.get_by_slug("coconut-oil") == coconut
        assert source.get_by_slug("missing") is None

    def test_bundled_database_loads(self):
        triggers = CsvTriggerSource().fetch_all()

        assert triggers
        assert len({t.slug for t in triggers}) == len(triggers)
        assert all(1 <= t.severity <= 3 for t in triggers)

    def test_missing_file_raises(self, tmp_path):
        source = CsvTriggerSource(csv_path=str(tmp_path / "nope.csv"))
        with pytest.raises(TriggerDataError):
            source.fetch_all()

    def test_rows_without_slug_are_skipped(self, tmp_path):
        path = tmp_path / "triggers.csv"
        path.write_text(
            "name,slug,aliases,categories,severity,notes\n"
            "Nameless,,,irritant,2,\n"
            "Menthol,menthol,,irritant,abc,\n",
            encoding="utf-8",
        )
        (menthol,) = CsvTriggerSource(csv_path=str(path)).fetch_all()
        assert menthol.slug == "menthol"
        assert menthol.severity == 1

    def test_reload_picks_up_changes(self, trigger_csv):
        source = CsvTriggerSource(csv_path=str(trigger_csv))
        with trigger_csv.open("a", encoding="utf-8") as fh:
            fh.write("Menthol,menthol,,irritant,2,\n")
        assert len(source.fetch_all()) == 2
        source.reload()
        assert len(source.fetch_all()) == 3


class TestCsvScanStore:
    def test_round_trip(self, tmp_path):
        store = CsvScanStore(path=str(tmp_path / "history" / "scans.csv"))
        scan_id = store.save(_event(text="Aqua, Parfum"))

        event = store.get(scan_id)
        assert event.id == scan_id
        assert event.raw_ingredients_text == "Aqua, Parfum"
        assert event.result_json["riskScore"] == 28
        assert event.input_type is InputType.PASTE
        assert event.created_at
        assert store.get("unknown") is None

    def test_history_is_newest_first(self, tmp_path):
        store = CsvScanStore(path=str(tmp_path / "scans.csv"))
        older = store.save(_event(created_at="2024-01-01T00:00:00+00:00"))
        newer = store.save(_event(created_at="2024-02-01T00:00:00+00:00"))
        store.save(_event(user_id="u2"))

        assert [e.id for e in store.list_for_user("u1")] == [newer, older]
        assert [e.id for e in store.list_for_user("u1", limit=1)] == [newer]

    def test_unwritable_path_raises(self, tmp_path):
        store = CsvScanStore(path=str(tmp_path))
        with pytest.raises(ScanPersistenceError):
            store.save(_event())


def test_in_memory_store_limit():
    store = InMemoryScanStore()
    ids = [store.save(_event(created_at=f"2024-01-0{i}T00:00:00+00:00")) for i in range(1, 5)]

    history = store.list_for_user("u1", limit=2)
    assert [e.id for e in history] == [ids[3], ids[2]]
    assert store.list_for_user("nobody") == []


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        if self.conn.fail:
            raise FakePsycopg.Error("connection lost")
        self.conn.executed.append((" ".join(sql.split()), params))

    def fetchall(self):
        return self.conn.rows

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None


class FakeConnection:
    def __init__(self, rows, fail=False):
        self.rows = rows
        self.fail = fail
        self.executed = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True


class FakePsycopg:
    class Error(Exception):
        pass

    def __init__(self, rows=(), fail=False, refuse=False):
        self.connection = FakeConnection(list(rows), fail=fail)
        self.refuse = refuse

    def connect(self, dsn, cursor_factory=None):
        if self.refuse:
            raise FakePsycopg.Error("connection refused")
        return self.connection


@pytest.fixture
def fake_db(monkeypatch):
    def install(rows=(), fail=False, refuse=False):
        fake = FakePsycopg(rows, fail=fail, refuse=refuse)
        monkeypatch.setattr(db_repository, "psycopg2", fake)
        return fake

    return install


class TestPostgresRepository:
    def test_fetch_all_maps_rows(self, fake_db):
        fake = fake_db(
            [
                {
                    "name": "Fragrance",
                    "slug": "fragrance",
                    "aliases": ["parfum"],
                    "categories": ["irritant"],
                    "severity": None,
                    "notes": None,
                }
            ]
        )
        (trigger,) = PostgresRepository("postgres://test").fetch_all()

        assert trigger.aliases == ("parfum",)
        assert trigger.severity == 1
        assert trigger.notes == ""
        assert fake.connection.closed

    def test_fetch_failure_raises_trigger_error(self, fake_db):
        fake_db(fail=True)
        with pytest.raises(TriggerDataError):
            PostgresRepository("postgres://test").fetch_all()

    def test_save_returns_generated_id(self, fake_db):
        fake = fake_db([{"id": 42}])
        scan_id = PostgresRepository("postgres://test").save(_event())

        assert scan_id == "42"
        sql, params = fake.connection.executed[0]
        assert "INSERT INTO scan_events" in sql
        assert json.loads(params[-1])["riskScore"] == 28

    def test_save_failure_raises_persistence_error(self, fake_db):
        fake_db(fail=True)
        with pytest.raises(ScanPersistenceError):
            PostgresRepository("postgres://test").save(_event())

    def test_get_decodes_row(self, fake_db):
        fake_db(
            [
                {
                    "id": 7,
                    "user_id": "u1",
                    "input_type": "barcode",
                    "product_id": 3,
                    "barcode": "123",
                    "raw_ingredients_text": "Aqua",
                    "result_json": '{"riskScore": 0}',
                    "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
                }
            ]
        )
        event = PostgresRepository("postgres://test").get("7")

        assert event.id == "7"
        assert event.product_id == "3"
        assert event.input_type is InputType.BARCODE
        assert event.result_json == {"riskScore": 0}
        assert event.created_at == "2024-01-01T00:00:00+00:00"

    def test_product_lookup(self, fake_db):
        fake_db([{"id": 3, "name": "Cream", "barcode": "123", "ingredients_text": "Aqua"}])
        product = PostgresRepository("postgres://test").get_product_by_barcode("123")

        assert product.id == "3"
        assert product.ingredients_text == "Aqua"
        assert product.source == "db"

    def test_product_lookup_failure_returns_none(self, fake_db):
        fake_db(refuse=True)
        repository = PostgresRepository("postgres://test")

        assert repository.get_product("3") is None
        assert repository.get_product_by_barcode("123") is None

    def test_barcode_falls_through_to_next_source_when_db_is_down(self, fake_db, fragrance):
        fake_db(refuse=True)
        products = FallbackProductSource(
            PostgresRepository("postgres://test"),
            InMemoryProductSource([ProductInfo(id="p-1", barcode="111", ingredients_text="Fragrance")]),
        )
        engine = ScanEngine(
            trigger_source=InMemoryTriggerSource([fragrance]),
            scan_store=InMemoryScanStore(),
            product_source=products,
        )
        outcome = engine.analyze(ScanRequest(input_type=InputType.BARCODE, barcode="111"))

        assert outcome.product_id == "p-1"
        assert outcome.result.risk_score == 28

    def test_unresolved_barcode_with_db_down_analyses_empty_text(self, fake_db, fragrance):
        fake_db(refuse=True)
        repository = PostgresRepository("postgres://test")
        engine = ScanEngine(
            trigger_source=InMemoryTriggerSource([fragrance]),
            scan_store=InMemoryScanStore(),
            product_source=repository,
        )
        outcome = engine.analyze(ScanRequest(input_type=InputType.BARCODE, barcode="111"))

        assert outcome.product_id is None
        assert outcome.result.risk_score == 0

    def test_scan_reads_raise_lookup_error(self, fake_db):
        fake_db(refuse=True)
        repository = PostgresRepository("postgres://test")

        with pytest.raises(ScanLookupError):
            repository.get("7")
        with pytest.raises(ScanLookupError):
            repository.list_for_user("u1")

    def test_history_limit_is_at_least_one(self, fake_db):
        fake = fake_db([])
        assert PostgresRepository("postgres://test").list_for_user("u1", limit=-1) == []

        _, params = fake.connection.executed[0]
        assert params == ("u1", 1)

    def test_requires_psycopg2(self, monkeypatch):
        monkeypatch.setattr(db_repository, "psycopg2", None)
        with pytest.raises(ModuleNotFoundError):
            PostgresRepository("postgres://test")
