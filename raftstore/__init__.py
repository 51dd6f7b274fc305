"""Raft log types, an async storage interface, replication events and replication progress."""

__version__ = "0.1.0"

__all__ = ["types", "storage", "events", "progress"]