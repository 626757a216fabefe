"""
Record views read from the record services and the composite aggregates built from them.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Models exchanged with camelCase JSON (record services and front-end)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorView(CamelModel):
    """One accessibility error found for a result."""

    id: int
    result_id: int
    wcag_criterion_id: Optional[int] = None
    error_code: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResultView(CamelModel):
    """Outcome of one WCAG criterion within an analysis."""

    id: int
    analysis_id: int
    wcag_criterion_id: Optional[int] = None
    wcag_criterion: Optional[str] = None
    level: Optional[str] = None
    severity: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AnalysisView(CamelModel):
    """An accessibility analysis run, owned by ``user_id``."""

    id: int
    user_id: int
    date_analysis: Optional[datetime] = None
    content_type: Optional[str] = None
    content_input: Optional[str] = None
    source_url: Optional[str] = None
    tool_used: Optional[str] = None
    status: Optional[str] = None
    summary_result: Optional[str] = None
    result_json: Optional[str] = None
    duration_ms: Optional[int] = None
    wcag_version: Optional[str] = None
    wcag_level: Optional[str] = None
    axe_violations: Optional[int] = None
    axe_needs_review: Optional[int] = None
    axe_recommendations: Optional[int] = None
    axe_passes: Optional[int] = None
    axe_incomplete: Optional[int] = None
    axe_inapplicable: Optional[int] = None
    ea_violations: Optional[int] = None
    ea_needs_review: Optional[int] = None
    ea_recommendations: Optional[int] = None
    ea_passes: Optional[int] = None
    ea_incomplete: Optional[int] = None
    ea_inapplicable: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompleteError(ErrorView):
    pass


class CompleteResult(ResultView):
    errors: List[CompleteError] = Field(default_factory=list)


class CompleteAnalysis(AnalysisView):
    results: List[CompleteResult] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(len(result.errors) for result in self.results)
