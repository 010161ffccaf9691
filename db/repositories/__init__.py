"""
Repository layer exports.
"""

from db.repositories.errors import ManualInputRepositoryError, SnapshotNotFoundError
from db.repositories.manual_input_repository import ManualInputRepository
from db.repositories.types import StoredManualInput

__all__ = [
    "ManualInputRepository",
    "StoredManualInput",
    "ManualInputRepositoryError",
    "SnapshotNotFoundError",
]
