"""Measurement evaluation and revision-lifecycle engine."""

import logging

logger = logging.getLogger("qms")
if not logger.handlers:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


__all__ = ["logger"]
