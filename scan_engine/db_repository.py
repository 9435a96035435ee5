from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

try:
    import psycopg2
    from psycopg2.extras import RealDictCursor
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    psycopg2 = None  # type: ignore
    RealDictCursor = None  # type: ignore

from .errors import ScanLookupError, ScanPersistenceError, TriggerDataError
from .history import DEFAULT_HISTORY_LIMIT, ScanEventStore
from .models import InputType, ProductInfo, ScanEvent, TriggerIngredient
from .openbeautyfacts_client import ProductSource
from .trigger_db import TriggerSource


def _db_errors() -> tuple:
    if psycopg2 is None:
        return (OSError,)
    return (psycopg2.Error, OSError)


class PostgresRepository(TriggerSource, ProductSource, ScanEventStore):
    """
    PostgreSQL-backed trigger, product and scan event store mirroring the
    trigger_ingredients, products and scan_events tables.
    """

    def __init__(self, dsn: str):
        if psycopg2 is None:
            raise ModuleNotFoundError(
                "psycopg2 is required for PostgresRepository. Install via "
                "'pip install psycopg2-binary'."
            )
        self.dsn = dsn
        self.log = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def _connection(self) -> Iterator:
        conn = psycopg2.connect(self.dsn, cursor_factory=RealDictCursor)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # -- trigger reference data -------------------------------------------

    def fetch_all(self) -> List[TriggerIngredient]:
        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT name, slug, aliases, categories, severity, notes
                        FROM trigger_ingredients
                        """
                    )
                    rows = cur.fetchall()
        except _db_errors() as exc:
            raise TriggerDataError("Failed to fetch trigger ingredients") from exc
        return [TriggerIngredient.from_row(row) for row in rows]

    def get_by_slug(self, slug: str) -> Optional[TriggerIngredient]:
        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT name, slug, aliases, categories, severity, notes
                        FROM trigger_ingredients
                        WHERE slug = %s
                        """,
                        (slug,),
                    )
                    row = cur.fetchone()
        except _db_errors() as exc:
            raise TriggerDataError(f"Failed to fetch trigger ingredient {slug}") from exc
        return TriggerIngredient.from_row(row) if row else None

    # -- product catalog ---------------------------------------------------

    def get_product(self, product_id: str) -> Optional[ProductInfo]:
        return self._fetch_product("id", product_id)

    def get_product_by_barcode(self, barcode: str) -> Optional[ProductInfo]:
        return self._fetch_product("barcode", barcode)

    def _fetch_product(self, column: str, value: str) -> Optional[ProductInfo]:
        # column is one of two fixed identifiers, never user input.
        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"""
                        SELECT id, name, barcode, ingredients_text
                        FROM products
                        WHERE {column} = %s
                        """,
                        (value,),
                    )
                    row = cur.fetchone()
        except _db_errors() as exc:
            self.log.warning("Product lookup failed for %s=%s: %s", column, value, exc)
            return None
        if not row:
            return None
        return ProductInfo(
            id=str(row["id"]),
            name=row.get("name") or "",
            barcode=row.get("barcode"),
            ingredients_text=row.get("ingredients_text"),
            source="db",
        )

    # -- scan events -------------------------------------------------------

    def save(self, event: ScanEvent) -> str:
        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO scan_events (
                            user_id, input_type, product_id, barcode,
                            raw_ingredients_text, result_json
                        )
                        VALUES (%s, %s, %s, %s, %s, %s::jsonb)
                        RETURNING id
                        """,
                        (
                            event.user_id,
                            event.input_type.value,
                            event.product_id,
                            event.barcode,
                            event.raw_ingredients_text,
                            json.dumps(event.result_json),
                        ),
                    )
                    row = cur.fetchone()
        except _db_errors() as exc:
            raise ScanPersistenceError("Failed to save scan event") from exc
        if not row:
            raise ScanPersistenceError("Failed to save scan event")
        return str(row["id"])

    def get(self, scan_id: str) -> Optional[ScanEvent]:
        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT id, user_id, input_type, product_id, barcode,
                               raw_ingredients_text, result_json, created_at
                        FROM scan_events
                        WHERE id = %s
                        """,
                        (scan_id,),
                    )
                    row = cur.fetchone()
        except _db_errors() as exc:
            raise ScanLookupError(f"Failed to fetch scan event {scan_id}") from exc
        return self._row_to_event(row) if row else None

    def list_for_user(
        self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[ScanEvent]:
        try:
            with self._connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT id, user_id, input_type, product_id, barcode,
                               raw_ingredients_text, result_json, created_at
                        FROM scan_events
                        WHERE user_id = %s
                        ORDER BY created_at DESC
                        LIMIT %s
                        """,
                        (user_id, max(1, limit)),
                    )
                    rows = cur.fetchall()
        except _db_errors() as exc:
            raise ScanLookupError(f"Failed to fetch scan history for {user_id}") from exc
        return [self._row_to_event(row) for row in rows]

    @staticmethod
    def _row_to_event(row) -> ScanEvent:
        result_json = row.get("result_json") or {}
        if isinstance(result_json, str):
            result_json = json.loads(result_json)
        created_at = row.get("created_at")
        return ScanEvent(
            id=str(row["id"]),
            user_id=str(row["user_id"]) if row.get("user_id") else None,
            input_type=InputType(row.get("input_type") or "paste"),
            product_id=str(row["product_id"]) if row.get("product_id") else None,
            barcode=row.get("barcode"),
            raw_ingredients_text=row.get("raw_ingredients_text") or "",
            result_json=result_json,
            created_at=created_at.isoformat()
            if hasattr(created_at, "isoformat")
            else created_at,
        )
