"""
Scan event persistence.

Stores one record per completed analysis, keyed by a generated id, and reads
them back for the result and history views. The CSV store is an append-only
audit log used by the local CLIs.
"""

from __future__ import annotations

import csv
import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .errors import ScanPersistenceError
from .models import InputType, ScanEvent

DEFAULT_HISTORY_LIMIT = 20


def new_scan_id() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScanEventStore:
    """
    Base interface for scan event storage.
    """

    def save(self, event: ScanEvent) -> str:
        """Persist the event and return its id."""
        raise NotImplementedError

    def get(self, scan_id: str) -> Optional[ScanEvent]:
        raise NotImplementedError

    def list_for_user(
        self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[ScanEvent]:
        raise NotImplementedError


def _newest_first(events: List[ScanEvent], limit: int) -> List[ScanEvent]:
    # Ties on created_at fall back to reverse insertion order.
    ordered = sorted(
        enumerate(events),
        key=lambda pair: (pair[1].created_at or "", pair[0]),
        reverse=True,
    )
    return [event for _, event in ordered][: max(0, limit)]


class InMemoryScanStore(ScanEventStore):
    def __init__(self):
        self.events: Dict[str, ScanEvent] = {}
        self._lock = threading.Lock()

    def save(self, event: ScanEvent) -> str:
        scan_id = event.id or new_scan_id()
        stored = ScanEvent(
            id=scan_id,
            user_id=event.user_id,
            input_type=event.input_type,
            product_id=event.product_id,
            barcode=event.barcode,
            raw_ingredients_text=event.raw_ingredients_text,
            result_json=event.result_json,
            created_at=event.created_at or utc_timestamp(),
        )
        with self._lock:
            self.events[scan_id] = stored
        return scan_id

    def get(self, scan_id: str) -> Optional[ScanEvent]:
        return self.events.get(scan_id)

    def list_for_user(
        self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[ScanEvent]:
        with self._lock:
            events = [e for e in self.events.values() if e.user_id == user_id]
        return _newest_first(events, limit)


class CsvScanStore(ScanEventStore):
    """
    Append-only CSV log of scan events; result_json is stored as a JSON column.
    """

    DEFAULT_PATH = Path("db/history/scan_events.csv")

    FIELDNAMES = [
        "id",
        "user_id",
        "input_type",
        "product_id",
        "barcode",
        "raw_ingredients_text",
        "result_json",
        "created_at",
    ]

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else self.DEFAULT_PATH
        self._lock = threading.Lock()
        self.log = logging.getLogger(self.__class__.__name__)

    def save(self, event: ScanEvent) -> str:
        scan_id = event.id or new_scan_id()
        row = {
            "id": scan_id,
            "user_id": event.user_id or "",
            "input_type": event.input_type.value,
            "product_id": event.product_id or "",
            "barcode": event.barcode or "",
            "raw_ingredients_text": event.raw_ingredients_text,
            "result_json": json.dumps(event.result_json, ensure_ascii=False),
            "created_at": event.created_at or utc_timestamp(),
        }
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                write_header = not self.path.exists()
                with self.path.open("a", newline="", encoding="utf-8") as fh:
                    writer = csv.DictWriter(fh, fieldnames=self.FIELDNAMES)
                    if write_header:
                        writer.writeheader()
                    writer.writerow(row)
        except OSError as exc:
            self.log.error("Scan insert error for %s: %s", self.path, exc)
            raise ScanPersistenceError("Failed to save scan event") from exc
        return scan_id

    def get(self, scan_id: str) -> Optional[ScanEvent]:
        for event in self._read_all():
            if event.id == scan_id:
                return event
        return None

    def list_for_user(
        self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[ScanEvent]:
        events = [e for e in self._read_all() if e.user_id == user_id]
        return _newest_first(events, limit)

    def _read_all(self) -> List[ScanEvent]:
        if not self.path.exists():
            return []
        events: List[ScanEvent] = []
        with self.path.open("r", newline="", encoding="utf-8") as fh:
            reader = csv.DictReader(fh)
            for row in reader:
                try:
                    result_json = json.loads(row.get("result_json") or "{}")
                except ValueError:
                    self.log.warning("Skipping unreadable scan row %s", row.get("id"))
                    continue
                events.append(
                    ScanEvent(
                        id=row.get("id") or None,
                        user_id=row.get("user_id") or None,
                        input_type=InputType(row.get("input_type") or "paste"),
                        product_id=row.get("product_id") or None,
                        barcode=row.get("barcode") or None,
                        raw_ingredients_text=row.get("raw_ingredients_text") or "",
                        result_json=result_json,
                        created_at=row.get("created_at") or None,
                    )
                )
        return events
