from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class Book:
    """A single book entry in the catalog."""

    id: int
    title: str
    author: str
    year: int
    pages: int

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.year})"

    def to_dict(self) -> dict:
        return asdict(self)

    def with_changes(self, **fields: Any) -> "Book":
        """Return a copy with the given non-id fields replaced."""
        if "id" in fields:
            raise ValueError("Book id cannot be changed.")
        return replace(self, **fields)

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> "Book":
        return Book(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            year=row["year"],
            pages=row["pages"],
        )
