import pytest
from fastapi.testclient import TestClient

from file_storage.app.services.storage import LocalStorage
from file_storage.main import create_app


@pytest.fixture
def storage_dir(tmp_path):
    """Storage root that does not exist yet, so startup has to create it."""
    return tmp_path / "data" / "uploads"


@pytest.fixture
def storage(storage_dir):
    return LocalStorage(storage_dir)


@pytest.fixture
def client(storage):
    # Entering the client runs the lifespan, which initializes storage
    with TestClient(create_app(storage), raise_server_exceptions=False) as test_client:
        yield test_client
