"""
Per-user quadrant boards for the HTTP surface.

A board's local state lives as long as the process; the first request for a
user loads it from the row store.
"""
import asyncio
import logging
from typing import Dict, Optional

from focusboard.core.config import settings
from focusboard.services.quadrant_board import PersistenceFailurePolicy, QuadrantBoard
from focusboard.services.row_store import RowStore, SqlAlchemyRowStore

logger = logging.getLogger(__name__)


def create_row_store() -> RowStore:
    """Build the row store selected by settings.store_backend."""
    if settings.store_backend == "rest":
        from focusboard.services.rest_store import RestRowStore
        return RestRowStore()
    return SqlAlchemyRowStore()


class BoardRegistry:
    """Keeps one QuadrantBoard per user id."""

    def __init__(self, store: Optional[RowStore] = None):
        self._store = store
        self.boards: Dict[str, QuadrantBoard] = {}
        self._load_locks: Dict[str, asyncio.Lock] = {}

    @property
    def store(self) -> RowStore:
        if self._store is None:
            self._store = create_row_store()
            logger.info(f"Using {type(self._store).__name__} row store")
        return self._store

    async def get(self, user_id: str, refresh: bool = False) -> QuadrantBoard:
        """Return the user's board, loading it on first access or when refresh is requested."""
        user_id = str(user_id)
        board = self.boards.get(user_id)
        if board is None:
            board = QuadrantBoard(
                self.store,
                user_id,
                failure_policy=PersistenceFailurePolicy(settings.persistence_failure_policy),
                sort_by_score=settings.sort_quadrants_by_score,
            )
            self.boards[user_id] = board

        # One load at a time per user; callers queued behind it find the board loaded
        async with self._load_lock(user_id):
            if refresh or not board.loaded:
                await board.load()
        return board

    def _load_lock(self, user_id: str) -> asyncio.Lock:
        """Get or create the load lock for a user."""
        if user_id not in self._load_locks:
            self._load_locks[user_id] = asyncio.Lock()
        return self._load_locks[user_id]

    async def aclose(self) -> None:
        if self._store is not None:
            await self._store.aclose()
        self.boards.clear()
        self._load_locks.clear()


# Global registry instance
board_registry = BoardRegistry()


def get_board_registry() -> BoardRegistry:
    """FastAPI dependency returning the global registry."""
    return board_registry
