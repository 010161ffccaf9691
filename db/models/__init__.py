"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.manual_input import (
    ManualChannelInput,
    ManualChannelSnapshot,
    ManualInput,
    ManualSnapshot,
)

__all__ = [
    "ManualInput",
    "ManualChannelInput",
    "ManualChannelSnapshot",
    "ManualSnapshot",
]
