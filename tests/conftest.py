import pytest

from backend.db.store import InMemoryCatalogStore
from backend.services.quality_service import QualityService
from seed.mock_data import build_mock_snapshot


@pytest.fixture
def snapshot():
    return build_mock_snapshot()


@pytest.fixture
def store(snapshot):
    return InMemoryCatalogStore(snapshot)


@pytest.fixture
def service(store):
    return QualityService(store)
