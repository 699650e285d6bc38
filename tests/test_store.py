import sqlite3

import pytest

from catalog import database
from catalog.book import Book
from catalog.store import BookStore, StorageError

DUNE = Book(1, "Dune", "Frank Herbert", 1965, 412)
EMMA = Book(2, "Emma", "Jane Austen", 1815, 474)
PERSUASION = Book(3, "Persuasion", "Jane Austen", 1817, 249)


@pytest.fixture
def filled(store):
    for book in (PERSUASION, DUNE, EMMA):
        store.insert(book)
    return store


def test_empty_table(store):
    assert store.get_all() == []
    assert store.count() == 0
    assert store.get_by_id(1) is None
    assert store.exists(1) is False


def test_insert_and_get_by_id(store):
    assert store.insert(DUNE) is True
    assert store.get_by_id(1) == DUNE
    assert store.exists(1) is True
    assert store.count() == 1


def test_get_all_orders_by_id(filled):
    assert [b.id for b in filled.get_all()] == [1, 2, 3]


def test_insert_duplicate_id_raises_storage_error(store):
    store.insert(DUNE)
    with pytest.raises(StorageError, match="UNIQUE"):
        store.insert(DUNE.with_changes(title="Dune Messiah"))
    assert store.get_by_id(1) == DUNE


def test_storage_error_chains_driver_error(store):
    store.insert(DUNE)
    with pytest.raises(StorageError) as excinfo:
        store.insert(DUNE)
    assert isinstance(excinfo.value.__cause__, sqlite3.IntegrityError)


def test_unbindable_values_raise_storage_error(store):
    with pytest.raises(StorageError) as excinfo:
        store.insert(DUNE.with_changes(pages=2 ** 64))
    assert isinstance(excinfo.value.__cause__, OverflowError)
    with pytest.raises(StorageError) as excinfo:
        store.search_by_title("\ud800")
    assert isinstance(excinfo.value.__cause__, UnicodeEncodeError)
    assert store.count() == 0


def test_update_changes_all_non_id_fields(filled):
    changed = Book(1, "Dune (Deluxe)", "F. Herbert", 1966, 500)
    assert filled.update(changed) is True
    assert filled.get_by_id(1) == changed
    assert filled.get_by_id(2) == EMMA


def test_update_missing_id_returns_false(store):
    assert store.update(DUNE) is False
    assert store.count() == 0


def test_delete(filled):
    assert filled.delete(2) is True
    assert filled.exists(2) is False
    assert filled.delete(2) is False
    assert filled.count() == 2


def test_search_by_title_is_substring_match(filled):
    assert [b.id for b in filled.search_by_title("u")] == [1, 3]
    assert filled.search_by_title("zzz") == []


def test_search_is_case_insensitive_for_ascii(filled):
    assert filled.search_by_title("DUNE") == [DUNE]


def test_search_by_author_orders_by_author_then_title(filled):
    extra = Book(4, "Dracula", "Bram Stoker", 1897, 418)
    filled.insert(extra)
    assert filled.search_by_author("a") == [extra, DUNE, EMMA, PERSUASION]


def test_search_treats_wildcards_literally(store):
    store.insert(Book(1, "100% Pure", "SomeXone", 2000, 10))
    store.insert(Book(2, "1000 Pure", "Some_one", 2000, 10))
    assert [b.id for b in store.search_by_title("0%")] == [1]
    assert [b.id for b in store.search_by_author("e_o")] == [2]
    assert store.search_by_title("\\") == []


def test_search_value_is_bound_not_interpolated(filled):
    assert filled.search_by_title("' OR '1'='1") == []
    assert filled.count() == 3


def test_operations_fail_with_storage_error_when_unreachable(tmp_path):
    store = BookStore(db_file=str(tmp_path / "missing" / "library.db"))
    with pytest.raises(StorageError):
        store.get_all()
    with pytest.raises(StorageError):
        store.count()
    with pytest.raises(StorageError):
        store.insert(DUNE)


def test_missing_table_raises_storage_error(tmp_path):
    store = BookStore(db_file=str(tmp_path / "empty.db"))
    with pytest.raises(StorageError, match="no such table"):
        store.exists(1)


def test_connection_released_after_failure(store, monkeypatch):
    opened = []
    real_connect = database.get_db_connection

    def tracking_connect(path=None):
        conn = real_connect(path)
        opened.append(conn)
        return conn

    monkeypatch.setattr(database, "get_db_connection", tracking_connect)
    store.insert(DUNE)
    with pytest.raises(StorageError):
        store.insert(DUNE)

    assert len(opened) == 2
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")


def test_each_call_uses_its_own_connection(store, monkeypatch):
    opened = []
    real_connect = database.get_db_connection

    def tracking_connect(path=None):
        conn = real_connect(path)
        opened.append(conn)
        return conn

    monkeypatch.setattr(database, "get_db_connection", tracking_connect)
    store.exists(1)
    store.get_all()
    store.count()
    assert len(opened) == 3
    assert len({id(c) for c in opened}) == 3
