import logging
from datetime import date
from typing import Any, List, Optional

from catalog.book import Book
from catalog.results import Failure, ServiceResult, Success
from catalog.store import BookStore, StorageError

logger = logging.getLogger(__name__)

MIN_YEAR = 1000
MAX_TEXT_LENGTH = 255


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_blank(text: Any) -> bool:
    return not isinstance(text, str) or not text.strip()


def _valid_id(book_id: Any) -> bool:
    return _is_int(book_id) and book_id > 0


def _text_length(text: str) -> int:
    """Length in UTF-16 code units; characters outside the BMP count twice."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def validate_book(book: Any, current_year: Optional[int] = None) -> ServiceResult:
    """Check a book's fields. Returns the first failing rule, in this order:
    null record, id, title, author, year range, pages, title length, author length.
    """
    year_limit = current_year or date.today().year

    if book is None or not isinstance(book, Book):
        return Failure("Book object cannot be null!")
    if not _valid_id(book.id):
        return Failure("Book ID must be a positive number!")
    if _is_blank(book.title):
        return Failure("Book title cannot be empty!")
    if _is_blank(book.author):
        return Failure("Book author cannot be empty!")
    if not _is_int(book.year) or not MIN_YEAR <= book.year <= year_limit:
        return Failure(f"Book year must be between {MIN_YEAR} and {year_limit}!")
    if not _is_int(book.pages) or book.pages <= 0:
        return Failure("Book pages must be a positive number!")
    if _text_length(book.title) > MAX_TEXT_LENGTH:
        return Failure(f"Book title is too long (max {MAX_TEXT_LENGTH} characters)!")
    if _text_length(book.author) > MAX_TEXT_LENGTH:
        return Failure(f"Book author name is too long (max {MAX_TEXT_LENGTH} characters)!")
    return Success("Book data is valid!")


def _storage_failure(operation: str, error: StorageError, data: Any = None) -> Failure:
    logger.error(f"{operation}: database error: {error}")
    return Failure(f"Database error: {error}", data)


class CatalogService:
    """Business rules around the book store.

    Every public method returns a ``Success`` or ``Failure``; storage errors
    are caught here and never reach the caller as exceptions.

    Existence checks and the mutation that follows them are separate round
    trips. A concurrent writer can slip in between; for ``add`` the primary
    key then rejects the insert and the caller gets a "Database error" result.
    """

    def __init__(self, store: Optional[BookStore] = None) -> None:
        self.store = store if store is not None else BookStore()

    def validate(self, book: Any) -> ServiceResult:
        result = validate_book(book)
        if not result.success:
            logger.warning(f"Validation failed: {result.message}")
        return result

    # ------------------------- Mutations ------------------------- #
    def add(self, book: Any) -> ServiceResult:
        validation = self.validate(book)
        if not validation.success:
            return validation
        try:
            if self.store.exists(book.id):
                logger.warning(f"Rejected duplicate book id {book.id}")
                return Failure(f"A book with ID {book.id} already exists!")
            if self.store.insert(book):
                logger.info(f"Added book {book.id}")
                return Success("Book added successfully!")
            return Failure("Failed to add book to database!")
        except StorageError as e:
            return _storage_failure("add", e)

    def update(self, book: Any) -> ServiceResult:
        validation = self.validate(book)
        if not validation.success:
            return validation
        try:
            if not self.store.exists(book.id):
                return Failure(f"Book with ID {book.id} not found!")
            if self.store.update(book):
                logger.info(f"Updated book {book.id}")
                return Success("Book updated successfully!")
            return Failure("Failed to update book!")
        except StorageError as e:
            return _storage_failure("update", e)

    def delete(self, book_id: Any) -> ServiceResult:
        if not _valid_id(book_id):
            return Failure("Invalid book ID!")
        try:
            if not self.store.exists(book_id):
                return Failure(f"Book with ID {book_id} not found!")
            if self.store.delete(book_id):
                logger.info(f"Deleted book {book_id}")
                return Success("Book deleted successfully!")
            return Failure("Failed to delete book!")
        except StorageError as e:
            return _storage_failure("delete", e)

    # ------------------------- Reads ------------------------- #
    def get_all(self) -> ServiceResult[List[Book]]:
        try:
            books = self.store.get_all()
        except StorageError as e:
            return _storage_failure("get_all", e)
        return Success("Books retrieved successfully!", books)

    def get_by_id(self, book_id: Any) -> ServiceResult[Book]:
        if not _valid_id(book_id):
            return Failure("Invalid book ID!")
        try:
            book = self.store.get_by_id(book_id)
        except StorageError as e:
            return _storage_failure("get_by_id", e)
        if book is None:
            return Failure(f"Book with ID {book_id} not found!")
        return Success("Book found!", book)

    def search_by_title(self, title: Any) -> ServiceResult[List[Book]]:
        if _is_blank(title):
            return Failure("Search title cannot be empty!")
        try:
            books = self.store.search_by_title(title.strip())
        except StorageError as e:
            return _storage_failure("search_by_title", e)
        if not books:
            return Success(f"No books found with title containing: {title}", books)
        return Success(f"Found {len(books)} book(s)", books)

    def search_by_author(self, author: Any) -> ServiceResult[List[Book]]:
        if _is_blank(author):
            return Failure("Search author cannot be empty!")
        try:
            books = self.store.search_by_author(author.strip())
        except StorageError as e:
            return _storage_failure("search_by_author", e)
        if not books:
            return Success(f"No books found by author: {author}", books)
        return Success(f"Found {len(books)} book(s)", books)

    def count(self) -> ServiceResult[int]:
        try:
            total = self.store.count()
        except StorageError as e:
            return _storage_failure("count", e, data=0)
        return Success("Total books count retrieved!", total)
