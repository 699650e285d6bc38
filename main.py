import logging
import sqlite3
import sys
from typing import Dict, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from catalog import database
from catalog.book import Book
from catalog.service import CatalogService
from catalog.ui_helpers import (
    book_table,
    get_output_mode,
    print_book,
    print_books,
    print_count,
    print_message,
    set_output_mode,
)
from config import settings

logger = logging.getLogger(__name__)

NUMBERS_ERROR = "Please enter valid numbers for ID, Year, and Pages!"
ID_ERROR = "Please enter a valid book ID!"
SEARCH_PROMPTS = {
    "Title": "Please enter a title to search for!",
    "Author": "Please enter an author to search for!",
}

console = Console()


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_service() -> CatalogService:
    """Build the catalog service, making sure the books table exists.

    An initialization error is reported and ends the command with exit code 1.
    """
    try:
        database.initialize_database()
    except sqlite3.Error as e:
        logger.error(f"Could not initialize database: {e}")
        print_message(False, f"Error creating database table: {e}")
        raise typer.Exit(code=1)
    return CatalogService()



def parse_book_fields(book_id: str, title: str, author: str, year: str, pages: str) -> Book:
    """Build a Book from raw form input. Raises ValueError on non-numeric fields."""
    return Book(
        id=int(book_id.strip()),
        title=title.strip(),
        author=author.strip(),
        year=int(year.strip()),
        pages=int(pages.strip()),
    )


def parse_id(book_id: str) -> int:
    return int(book_id.strip())


# --- Typer CLI Application ---
app = typer.Typer(help="Library Management System CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global options for the CLI (e.g. output mode)."""
    configure_logging()
    if output:
        set_output_mode(output)


def _finish(result) -> None:
    print_message(result.success, result.message)
    if not result.success:
        raise typer.Exit(code=1)


def _finish_parse_error(message: str) -> None:
    print_message(False, message)
    raise typer.Exit(code=1)


def _print_search(result, title: str) -> None:
    if not result.success:
        _finish(result)
    if get_output_mode() == "json":
        print_books(result.data)
        return
    print(result.message)
    if result.data:
        print_books(result.data, title=title)


@app.command("list")
def cli_list():
    """List all books ordered by ID."""
    result = get_service().get_all()
    if not result.success:
        _finish(result)
    print_books(result.data)


@app.command("add")
def cli_add(book_id: str, title: str, author: str, year: str, pages: str):
    """Add a new book."""
    try:
        book = parse_book_fields(book_id, title, author, year, pages)
    except ValueError:
        _finish_parse_error(NUMBERS_ERROR)
    _finish(get_service().add(book))


@app.command("update")
def cli_update(book_id: str, title: str, author: str, year: str, pages: str):
    """Replace the title, author, year and pages of an existing book."""
    try:
        book = parse_book_fields(book_id, title, author, year, pages)
    except ValueError:
        _finish_parse_error(NUMBERS_ERROR)
    _finish(get_service().update(book))


@app.command("delete")
def cli_delete(
    book_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete a book by ID."""
    try:
        parsed_id = parse_id(book_id)
    except ValueError:
        _finish_parse_error(ID_ERROR)
    if not yes and not typer.confirm(f"Are you sure you want to delete the book with ID: {parsed_id}?"):
        print("Deletion cancelled.")
        return
    _finish(get_service().delete(parsed_id))


@app.command("find")
def cli_find(book_id: str):
    """Show a single book by ID."""
    try:
        parsed_id = parse_id(book_id)
    except ValueError:
        _finish_parse_error(ID_ERROR)
    result = get_service().get_by_id(parsed_id)
    if not result.success:
        _finish(result)
    print_book(result.data)


@app.command("search-title")
def cli_search_title(text: str):
    """Search books whose title contains TEXT."""
    _print_search(get_service().search_by_title(text), f"🔎 Title contains '{escape(text)}'")


@app.command("search-author")
def cli_search_author(text: str):
    """Search books whose author contains TEXT."""
    _print_search(get_service().search_by_author(text), f"🔎 Author contains '{escape(text)}'")


@app.command("count")
def cli_count():
    """Show the total number of books."""
    result = get_service().count()
    if not result.success:
        _finish(result)
    print_count(result.data)


@app.command("init-db")
def cli_init_db():
    """Create the books table if it does not exist."""
    try:
        database.initialize_database()
    except sqlite3.Error as e:
        print(f"Error creating database table: {e}")
        raise typer.Exit(code=1)
    print("Database table 'books' created or verified successfully!")


@app.command("check-db")
def cli_check_db():
    """Check that the database can be reached."""
    if database.test_connection():
        print("Connected to database successfully!")
    else:
        print("Database connection failed!")
        raise typer.Exit(code=1)


# --- Interactive form ---
class BookForm:
    """Field values and status line of the interactive form."""

    FIELDS = ("id", "title", "author", "year", "pages")

    def __init__(self, service: CatalogService) -> None:
        self.service = service
        self.fields: Dict[str, str] = {}
        self.status = "Ready"
        self.clear()

    def clear(self) -> None:
        self.fields = {name: "" for name in self.FIELDS}

    def fill(self, book: Book) -> None:
        self.fields = {name: str(value) for name, value in book.to_dict().items()}

    def prompt_fields(self) -> None:
        for name in self.FIELDS:
            self.fields[name] = Prompt.ask(f"{name.capitalize()}", default=self.fields[name])

    def to_book(self) -> Book:
        f = self.fields
        return parse_book_fields(f["id"], f["title"], f["author"], f["year"], f["pages"])

    # ------------------------- Notices ------------------------- #
    def show_success(self, message: str) -> None:
        console.print(Panel.fit(f"[green]{escape(message)}[/]", title="✅ Success", border_style="green"))

    def show_error(self, title: str, message: str) -> None:
        console.print(Panel.fit(f"[red]{escape(message)}[/]", title=f"❌ {title}", border_style="red"))

    def show_books(self, books, title: str = "📚 Catalog") -> None:
        if books:
            console.print(book_table(books, title))
        else:
            console.print("[yellow]No books to show.[/]")

    # ------------------------- Actions ------------------------- #
    def check_connection(self) -> None:
        try:
            database.initialize_database()
        except sqlite3.Error as e:
            logger.error(f"Could not initialize database: {e}")
            self.show_error("Database Connection Error", f"Error creating database table: {e}")
            self.status = "Database connection failed!"
            return
        if database.test_connection():
            self.status = "Connected to database successfully!"
        else:
            self.show_error(
                "Database Connection Error",
                "Cannot connect to database!\nPlease check your database configuration.",
            )
            self.status = "Database connection failed!"

    def load_books(self) -> None:
        self.status = "Loading books..."
        result = self.service.get_all()
        if result.success:
            self.show_books(result.data)
            self.status = f"Loaded {len(result.data)} books"
        else:
            self.show_error("Load Books", result.message)
            self.status = "Failed to load books"

    def _mutate(self, title: str, action, done: str) -> None:
        self.prompt_fields()
        try:
            book = self.to_book()
        except ValueError:
            self.show_error(title, NUMBERS_ERROR)
            return
        result = action(book)
        if result.success:
            self.show_success(result.message)
            self.clear()
            self.load_books()
            self.status = done
        else:
            self.show_error(title, result.message)
            self.status = f"Failed to {title.lower()}"

    def add_book(self) -> None:
        self._mutate("Add Book", self.service.add, "Book added successfully")

    def update_book(self) -> None:
        self._mutate("Update Book", self.service.update, "Book updated successfully")

    def delete_book(self) -> None:
        id_text = Prompt.ask("ID of the book to delete", default=self.fields["id"]).strip()
        if not id_text:
            self.show_error("Delete Book", "Please enter a book ID to delete!")
            return
        try:
            book_id = parse_id(id_text)
        except ValueError:
            self.show_error("Delete Book", ID_ERROR)
            return
        if not Confirm.ask(f"Are you sure you want to delete the book with ID: {book_id}?", default=False):
            self.status = "Deletion cancelled"
            return
        result = self.service.delete(book_id)
        if result.success:
            self.show_success(result.message)
            self.clear()
            self.load_books()
            self.status = "Book deleted successfully"
        else:
            self.show_error("Delete Book", result.message)
            self.status = "Failed to delete book"

    def find_book(self) -> None:
        id_text = Prompt.ask("ID of the book to load", default=self.fields["id"]).strip()
        try:
            book_id = parse_id(id_text)
        except ValueError:
            self.show_error("Find Book", ID_ERROR)
            return
        result = self.service.get_by_id(book_id)
        if result.success:
            self.fill(result.data)
            self.show_books([result.data], title="🔍 Book Found")
            self.status = f"Loaded book {book_id} into the form"
        else:
            self.show_error("Find Book", result.message)
            self.status = "Book not found"

    def _search(self, label: str, action) -> None:
        text = Prompt.ask(f"{label} to search for", default="").strip()
        if not text:
            self.show_error("Search", SEARCH_PROMPTS[label])
            return
        self.status = f"Searching by {label.lower()}..."
        result = action(text)
        if result.success:
            self.show_books(result.data, title=f"🔎 Search Results for '{escape(text)}'")
            self.status = result.message
        else:
            self.show_error(f"Search by {label}", result.message)
            self.status = "Search failed"

    def search_by_title(self) -> None:
        self._search("Title", self.service.search_by_title)

    def search_by_author(self) -> None:
        self._search("Author", self.service.search_by_author)

    def show_count(self) -> None:
        result = self.service.count()
        if result.success:
            console.print(Panel.fit(f"[bold]Total Books:[/] {result.data}", title="📊 Stats", border_style="blue"))
            self.status = f"{result.data} books in catalog"
        else:
            self.show_error("Count", result.message)
            self.status = "Failed to count books"

    def clear_fields(self) -> None:
        self.clear()
        self.status = "Fields cleared"


def run_menu() -> None:
    """Interactive form for the book catalog."""
    configure_logging()
    form = BookForm(CatalogService())
    form.check_connection()

    actions = {
        "1": form.load_books,
        "2": form.add_book,
        "3": form.update_book,
        "4": form.delete_book,
        "5": form.find_book,
        "6": form.search_by_title,
        "7": form.search_by_author,
        "8": form.show_count,
        "9": form.clear_fields,
    }

    def render_menu() -> None:
        menu_items = [
            ("1", "Refresh book list", "📚"),
            ("2", "Add book", "➕"),
            ("3", "Update book", "✏️"),
            ("4", "Delete book", "🗑️"),
            ("5", "Load book by ID", "🔎"),
            ("6", "Search by title", "💡"),
            ("7", "Search by author", "👤"),
            ("8", "Show book count", "📊"),
            ("9", "Clear fields", "🧹"),
            ("0", "Exit", "🚪"),
        ]

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon in menu_items:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

        fields = "  ".join(f"[bold]{name}:[/] {escape(value) or '-'}" for name, value in form.fields.items())
        console.print(Panel(
            table,
            title=f"{settings.app_name} v{settings.app_version}",
            subtitle=fields,
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))
        console.print(f"[dim]Status:[/] {escape(form.status)}")

    form.load_books()
    while True:
        render_menu()
        choice = Prompt.ask("Please choose an option", choices=list(actions) + ["0"], default="1").strip()
        if choice == "0":
            console.print("[green]Goodbye![/]")
            break
        actions[choice]()
        print()  # blank line between operations


def cli() -> None:
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()


if __name__ == "__main__":
    cli()
