"""Result models returned by the search engine."""

from datetime import datetime, timezone
from typing import Any, List

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """Score and matched tokens for a single document."""

    document_id: Any = Field(..., description="Identifier of the matching document")
    score: float = Field(..., ge=0.0, le=100.0, description="Share of search tokens matched (0-100)")
    matches: List[str] = Field(..., description="Search tokens that matched the document")


class SearchResponse(BaseModel):
    """Ranked results for a query."""

    query: Any = Field(..., description="Original query, raw string or token list")
    search_tokens: List[str] = Field(..., description="Index tokens that were searched")
    confidence: float = Field(..., description="Fuzziness threshold used (100 = exact)")
    total_results: int = Field(..., description="Total number of results")
    results: List[SearchResult] = Field(..., description="Results ordered by descending score")
    execution_time_ms: float = Field(..., description="Query execution time in milliseconds")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Response timestamp"
    )
