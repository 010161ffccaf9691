"""
app/api/routers package marker.
"""

from app.api.routers.manual_input_router import router as manual_input_router

__all__ = [
    "manual_input_router",
]
