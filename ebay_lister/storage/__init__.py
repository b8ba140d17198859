"""Persisted listing history"""

from .history_store import HISTORY_KEY, HISTORY_LIMIT, HistoryStore

__all__ = ["HISTORY_KEY", "HISTORY_LIMIT", "HistoryStore"]
