"""
Trigger ingredient reference data.

Loads the curated trigger database (CSV export of trigger_ingredients) into an
immutable in-memory snapshot that concurrent analyses can share without locking.
"""

from __future__ import annotations

# Standard library helpers for CSV parsing and paths.
import csv
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .errors import TriggerDataError
from .models import TriggerIngredient

LIST_SEPARATOR = "|"


class TriggerSource:
    """
    Base interface for any trigger reference store (CSV, DB, memory).
    """

    def fetch_all(self) -> List[TriggerIngredient]:
        raise NotImplementedError

    def get_by_slug(self, slug: str) -> Optional[TriggerIngredient]:
        for trigger in self.fetch_all():
            if trigger.slug == slug:
                return trigger
        return None


class InMemoryTriggerSource(TriggerSource):
    def __init__(self, triggers: Iterable[TriggerIngredient] = ()):
        self.triggers: Tuple[TriggerIngredient, ...] = tuple(triggers)

    def fetch_all(self) -> List[TriggerIngredient]:
        return list(self.triggers)


class CsvTriggerSource(TriggerSource):
    """
    Reads db/trigger_ingredients.csv. Aliases and categories are pipe-separated
    within their columns, e.g. ``parfum|perfume``.
    """

    DEFAULT_CSV_PATH = (
        Path(__file__).resolve().parent.parent / "db" / "trigger_ingredients.csv"
    )

    def __init__(self, csv_path: Optional[str] = None, preload: bool = True):
        self.csv_path = Path(csv_path) if csv_path else self.DEFAULT_CSV_PATH
        self.triggers: Tuple[TriggerIngredient, ...] = ()
        self.loaded = False
        self.log = logging.getLogger(self.__class__.__name__)
        if preload and self.csv_path.exists():
            self._load()

    def fetch_all(self) -> List[TriggerIngredient]:
        if not self.loaded:
            self._load()
        return list(self.triggers)

    def reload(self) -> None:
        self._load()

    def _load(self) -> None:
        try:
            with self.csv_path.open("r", encoding="utf-8", newline="") as fh:
                reader = csv.DictReader(fh)
                triggers = [self._row_to_trigger(row) for row in reader]
        except OSError as exc:
            self.log.error("Unable to read trigger database %s: %s", self.csv_path, exc)
            raise TriggerDataError(
                f"Failed to fetch trigger ingredients from {self.csv_path}"
            ) from exc

        # Rows without a slug cannot be deduplicated and are skipped.
        self.triggers = tuple(t for t in triggers if t.slug)
        self.loaded = True
        self.log.info(
            "Loaded %d trigger ingredient(s) from %s", len(self.triggers), self.csv_path
        )

    @staticmethod
    def _row_to_trigger(row: dict) -> TriggerIngredient:
        return TriggerIngredient.from_row(
            {
                "name": (row.get("name") or "").strip(),
                "slug": (row.get("slug") or "").strip(),
                "aliases": _split_list(row.get("aliases")),
                "categories": _split_list(row.get("categories")),
                "severity": (row.get("severity") or "").strip() or None,
                "notes": (row.get("notes") or "").strip(),
            }
        )


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(LIST_SEPARATOR) if item.strip()]
