"""Offline-first habit and mood sync: device outbox, idempotent server apply, streak analytics."""

__version__ = "0.1.0"
