"""Customer account reconciliation console (PySide6 desktop client for the business API)."""

__version__ = "0.1.0"
