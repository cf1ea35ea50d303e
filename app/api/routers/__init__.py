"""
app/api/routers package marker.
"""

from app.api.routers.race_results import router as race_results_router

__all__ = ["race_results_router"]
