"""
Composite analysis aggregation.

Builds the analysis -> results -> errors tree by fanning out to the three
record read services. Reads are awaited one after another and are not
wrapped in any snapshot, so the tree reflects whatever each service
returned at the moment it was asked.
"""

from typing import List, Optional

from shared.logging import get_logger
from .readers import AnalysisReader, ErrorReader, ResultReader
from .models import CompleteAnalysis, CompleteError, CompleteResult, ResultView


class CompositeAnalysisService:
    """Assembles complete analyses from the analysis, result and error readers."""

    def __init__(
        self,
        analysis_reader: AnalysisReader,
        result_reader: ResultReader,
        error_reader: ErrorReader,
    ):
        self.analysis_reader = analysis_reader
        self.result_reader = result_reader
        self.error_reader = error_reader
        self.logger = get_logger("analysis.composite")

    async def get_complete_by_id(self, analysis_id: int) -> Optional[CompleteAnalysis]:
        """Return the full tree for one analysis, or None when it does not exist.

        Reader failures propagate to the caller untouched.
        """
        analysis = await self.analysis_reader.get_by_id(analysis_id)
        if analysis is None:
            return None

        results = await self.result_reader.get_by_analysis(analysis_id)

        complete_results: List[CompleteResult] = []
        for result in results:
            complete_results.append(await self._complete_result(result))

        complete = CompleteAnalysis(
            **analysis.model_dump(),
            results=complete_results,
        )
        self.logger.debug(
            "Composite analysis assembled",
            analysis_id=analysis_id,
            result_count=len(complete.results),
            error_count=complete.error_count,
        )
        return complete

    async def get_complete_by_user(self, user_id: int) -> List[CompleteAnalysis]:
        """Return the full tree of every analysis owned by ``user_id``.

        Analyses that disappear between listing and assembly are skipped.
        """
        analyses = await self.analysis_reader.get_by_user(user_id)

        complete_analyses: List[CompleteAnalysis] = []
        for analysis in analyses:
            complete = await self.get_complete_by_id(analysis.id)
            if complete is None:
                self.logger.debug(
                    "Analysis vanished before assembly, skipping",
                    analysis_id=analysis.id,
                    user_id=user_id,
                )
                continue
            complete_analyses.append(complete)

        return complete_analyses

    async def _complete_result(self, result: ResultView) -> CompleteResult:
        errors = await self.error_reader.get_by_result(result.id)
        return CompleteResult(
            **result.model_dump(),
            errors=[CompleteError(**error.model_dump()) for error in errors],
        )
