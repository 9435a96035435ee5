"""
Runtime configuration read from the environment, plus the wiring that turns it
into a ready ScanEngine. CLI flags override these values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .history import CsvScanStore
from .matcher import TriggerMatcher
from .openbeautyfacts_client import OpenBeautyFactsClient
from .scan_engine import ScanEngine
from .trigger_db import CsvTriggerSource

TRUTHY = ("1", "true", "yes", "on")


def _env_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUTHY


@dataclass
class ScanSettings:
    db_dsn: Optional[str] = None
    triggers_csv: Optional[str] = None
    history_csv: Optional[str] = None
    word_boundary: bool = False
    log_level: str = "INFO"
    http_timeout: float = 5.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScanSettings":
        env = os.environ if environ is None else environ
        try:
            timeout = float(env.get("SCAN_HTTP_TIMEOUT") or 5.0)
        except ValueError:
            timeout = 5.0
        return cls(
            db_dsn=env.get("SCAN_DB_DSN") or None,
            triggers_csv=env.get("SCAN_TRIGGERS_CSV") or None,
            history_csv=env.get("SCAN_HISTORY_CSV") or None,
            word_boundary=_env_bool(env.get("SCAN_WORD_BOUNDARY")),
            log_level=(env.get("SCAN_LOG_LEVEL") or "INFO").upper(),
            http_timeout=timeout,
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_engine(settings: ScanSettings) -> ScanEngine:
    """
    Postgres backs everything when a DSN is configured; otherwise the bundled
    CSV trigger database, a CSV scan log and OpenBeautyFacts barcode lookups.
    """
    matcher = TriggerMatcher(word_boundary=settings.word_boundary)
    if settings.db_dsn:
        # Imported lazily so psycopg2 is only needed for database deployments.
        from .db_repository import PostgresRepository
        from .openbeautyfacts_client import FallbackProductSource

        repository = PostgresRepository(settings.db_dsn)
        return ScanEngine(
            trigger_source=repository,
            scan_store=repository,
            product_source=FallbackProductSource(
                repository, OpenBeautyFactsClient(timeout=settings.http_timeout)
            ),
            matcher=matcher,
        )

    return ScanEngine(
        trigger_source=CsvTriggerSource(csv_path=settings.triggers_csv),
        scan_store=CsvScanStore(path=settings.history_csv),
        product_source=OpenBeautyFactsClient(timeout=settings.http_timeout),
        matcher=matcher,
    )
