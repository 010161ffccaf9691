"""
Repository-layer exceptions for manual input persistence.
"""

from __future__ import annotations


class ManualInputRepositoryError(Exception):
    """Base exception for manual input repository failures."""


class SnapshotNotFoundError(ManualInputRepositoryError):
    """Raised when an owner has no stored manual snapshot."""

    def __init__(self, owner_id: str) -> None:
        self.owner_id = owner_id
        super().__init__(f"No manual snapshot stored for owner '{owner_id}'.")
