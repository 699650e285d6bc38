import os
import json
from typing import List

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from catalog.book import Book

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    mode = os.environ.get(OUTPUT_MODE_ENV, "plain").lower()
    return mode if mode in OUTPUT_MODES else "plain"


def book_table(books: List[Book], title: str = "📚 Books") -> Table:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("ID", style="magenta", justify="right", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Year", justify="right")
    table.add_column("Pages", justify="right")
    for b in books:
        table.add_row(str(b.id), escape(b.title), escape(b.author), str(b.year), str(b.pages))
    return table


def print_books(books: List[Book], title: str = "📚 Books") -> None:
    """Print books according to the current output mode.
    - plain: 'ID - Title by Author (Year, Pages pages)' lines, or 'No books in library.'
    - json: JSON array of book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print("No books in library.")
        return

    if mode == "rich":
        _console.print(book_table(books, title))
    else:
        for b in books:
            print(f"{b.id} - {b.title} by {b.author} ({b.year}, {b.pages} pages)")


def print_book(book: Book) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]ID:[/] {book.id}\n"
            f"[bold]Title:[/] {escape(book.title)}\n"
            f"[bold]Author:[/] {escape(book.author)}\n"
            f"[bold]Year:[/] {book.year}\n"
            f"[bold]Pages:[/] {book.pages}"
        )
        _console.print(Panel.fit(content, title="🔍 Book Found", border_style="green"))
    else:
        print("Book Found")
        print(f"ID: {book.id}")
        print(f"Title: {book.title}")
        print(f"Author: {book.author}")
        print(f"Year: {book.year}")
        print(f"Pages: {book.pages}")


def print_count(total: int) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps({"total_books": total}))
    elif mode == "rich":
        _console.print(Panel.fit(f"[bold]Total Books:[/] {total}", title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {total}")


def print_message(success: bool, message: str) -> None:
    """Print the outcome of an operation that has no records to show."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps({"success": success, "message": message}, ensure_ascii=False))
    elif mode == "rich":
        style = "green" if success else "red"
        title = "✅ Success" if success else "❌ Error"
        _console.print(Panel.fit(f"[{style}]{escape(message)}[/]", title=title, border_style=style))
    else:
        print(message if success else f"Error: {message}")
