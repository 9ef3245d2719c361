"""Result file persistence."""

from reportforge.storage.json_store import ResultStore

__all__ = ["ResultStore"]
