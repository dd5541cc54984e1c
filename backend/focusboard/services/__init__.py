# Services module
from .quadrant_calculator import QuadrantCalculator, calculate_smart_score, get_eisenhower_quadrant
from .quadrant_board import PersistenceFailurePolicy, QuadrantBoard
from .row_store import RowFilter, RowNotFoundError, RowStore, RowStoreError, SqlAlchemyRowStore

__all__ = [
    "QuadrantCalculator",
    "calculate_smart_score",
    "get_eisenhower_quadrant",
    "QuadrantBoard",
    "PersistenceFailurePolicy",
    "RowStore",
    "RowFilter",
    "RowStoreError",
    "RowNotFoundError",
    "SqlAlchemyRowStore",
]
