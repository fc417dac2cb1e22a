"""Seed data for the catalog store: built-in mock catalog and JSON/CSV seed files."""

import logging
from dataclasses import dataclass, field
from typing import Dict

logger = logging.getLogger("seed")
if not logger.handlers:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@dataclass
class SeedMetrics:
    """Track what a seed load produced."""

    parts_loaded: int = 0
    gauges_loaded: int = 0
    plans_loaded: int = 0
    samples_loaded: int = 0
    csv_rows_processed: int = 0
    extra: Dict[str, int] = field(default_factory=dict)

    def add_records(self, kind: str, count: int) -> None:
        attribute = f"{kind}_loaded"
        setattr(self, attribute, getattr(self, attribute) + count)
        logger.debug("Added %s %s; total=%s", count, kind, getattr(self, attribute))

    def add_rows(self, count: int) -> None:
        self.csv_rows_processed += count
        logger.debug("Added %s CSV rows; total=%s", count, self.csv_rows_processed)

    def increment_extra(self, key: str, count: int = 1) -> None:
        self.extra[key] = self.extra.get(key, 0) + count
        logger.debug("Incremented %s metric by %s; total=%s", key, count, self.extra[key])


__all__ = ["SeedMetrics", "logger"]
