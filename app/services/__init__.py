"""
app/services package marker.
"""

from app.services.export_service import ExportPayload, export_results
from app.services.race_results_service import (
    InlineTaskExecutor,
    RaceResultsService,
    ThreadPoolTaskExecutor,
    build_race_results_service,
    get_race_results_service,
)

__all__ = [
    "ExportPayload",
    "export_results",
    "InlineTaskExecutor",
    "RaceResultsService",
    "ThreadPoolTaskExecutor",
    "build_race_results_service",
    "get_race_results_service",
]
