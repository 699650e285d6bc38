"""Book Catalog - Core Application Package

This package contains the core application modules including:
- Data model (book.py)
- Connection helper and schema (database.py)
- Book store / queries (store.py)
- Result envelope (results.py)
- Catalog service and validation (service.py)
- CLI output helpers (ui_helpers.py)
"""
