"""
Domain logic for the composite read path.

Includes the analysis tree aggregation and the ownership policy applied
before any of it is returned to a caller.
"""

from .access_control import AccessPolicy
from .composite import CompositeAnalysisService
from .readers import AnalysisReader, ErrorReader, ResultReader
from .models import (
    AnalysisView,
    CompleteAnalysis,
    CompleteError,
    CompleteResult,
    ErrorView,
    ResultView,
)

__all__ = [
    "AccessPolicy",
    "AnalysisReader",
    "AnalysisView",
    "CompleteAnalysis",
    "CompleteError",
    "CompleteResult",
    "CompositeAnalysisService",
    "ErrorReader",
    "ErrorView",
    "ResultReader",
    "ResultView",
]
