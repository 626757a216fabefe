"""
Read contracts of the record services consumed by the composite path.

Readers return ``None`` or an empty list when there is no data and raise
only on genuine failures.
"""

from typing import List, Optional, Protocol

from .models import AnalysisView, ErrorView, ResultView


class AnalysisReader(Protocol):
    async def get_by_id(self, analysis_id: int) -> Optional[AnalysisView]:
        ...

    async def get_by_user(self, user_id: int) -> List[AnalysisView]:
        ...


class ResultReader(Protocol):
    async def get_by_analysis(self, analysis_id: int) -> List[ResultView]:
        ...


class ErrorReader(Protocol):
    async def get_by_result(self, result_id: int) -> List[ErrorView]:
        ...
