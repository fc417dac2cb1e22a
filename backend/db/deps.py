"""Store and service dependencies for FastAPI routes."""

from functools import lru_cache
from pathlib import Path
import os

from fastapi import Depends, HTTPException, status

from backend.db.store import InMemoryCatalogStore
from backend.services.quality_service import QualityService
from seed.loader import load_seed_file
from seed.mock_data import build_mock_snapshot

SEED_ENV_VAR = "QMS_SEED_PATH"


def get_seed_path() -> Path | None:
    """Resolve the optional seed file from the environment."""
    env_override = os.environ.get(SEED_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser()
    return None


@lru_cache(maxsize=1)
def get_store() -> InMemoryCatalogStore:
    """Process-wide store, seeded once from the seed file or the mock catalog."""
    seed_path = get_seed_path()
    if seed_path is None:
        return InMemoryCatalogStore(build_mock_snapshot())

    if not seed_path.exists():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=(
                f"Seed file not found at {seed_path}. "
                f"Set {SEED_ENV_VAR} to override the location."
            ),
        )
    return InMemoryCatalogStore(load_seed_file(seed_path))


def get_quality_service(store: InMemoryCatalogStore = Depends(get_store)) -> QualityService:
    return QualityService(store)
