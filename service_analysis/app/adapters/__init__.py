"""
Adapters package for the Composite Analysis Service.

Contains HTTP client wrappers for the record services (analyses, results,
errors). These adapters encapsulate:

- Base URLs and request shapes
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .record_clients import AnalysisClient, ErrorClient, RecordServiceClient, ResultClient

__all__ = [
    "AnalysisClient",
    "ErrorClient",
    "RecordServiceClient",
    "ResultClient",
]
