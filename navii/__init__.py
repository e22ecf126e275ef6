"""Resumable geographical navigation over locations and search queries, stored in SQLite."""

__version__ = "0.1.0"