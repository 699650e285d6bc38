import pytest

from catalog import database
from catalog.service import CatalogService
from catalog.store import BookStore
from catalog.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture(autouse=True)
def db_file(tmp_path, request, monkeypatch):
    # Create a unique database file for each test and make it the default
    path = str(tmp_path / f"test_{request.node.name}.db")
    monkeypatch.setattr(database, "DATABASE_FILE", path)
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    database.initialize_database(path)
    return path


@pytest.fixture
def store(db_file):
    return BookStore(db_file=db_file)


@pytest.fixture
def service(store):
    return CatalogService(store)
