from __future__ import annotations

import math
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _round_count(value: Any) -> Any:
    # Models sometimes emit counts as 2850.0 or "2850".
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            value = float(value.replace(",", "").strip())
        except ValueError:
            return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("count must be a finite number")
        return int(round(value))
    return value


Count = Annotated[int, BeforeValidator(_round_count)]


class InsightModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HistoryPoint(InsightModel):
    month: str = ""
    value: float = 0


class RedditPost(InsightModel):
    title: str = ""
    url: str = ""
    snippet: str = ""
    summary_cn: str = Field(default="", alias="summary_cn")
    subreddit: str = ""
    upvotes: Count = 0
    comments: Count = 0
    date: str = ""
    sentiment: str = "neutral"


class UserPersona(InsightModel):
    type: str = ""
    motivation: str = ""
    complaints: str = ""
    scenario: str = ""
    severity: str = ""
    tone: str = ""


class PainRadarPoint(InsightModel):
    subject: str = ""
    value: float = Field(default=0, alias="A")
    full_mark: float = 25


class PainPoint(InsightModel):
    """Scored pain point. ``total_score`` is trusted as delivered, never recomputed."""

    id: str = ""
    title: str = ""
    severity: float = 0
    frequency: float = 0
    recency: float = 0
    unmet_need: float = 0
    total_score: float = 0
    quotes: List[str] = Field(default_factory=list)


class Topic(InsightModel):
    title: str = ""
    growth: float = 0
    volume: Count = 0
    sentiment: float = 0
    history: List[HistoryPoint] = Field(default_factory=list)
    pain_points: Optional[List[PainPoint]] = None
    brands: Optional[List[str]] = None
    user_persona: Optional[UserPersona] = None
    top_posts: Optional[List[RedditPost]] = None


class SubredditInsight(InsightModel):
    name: str = ""
    member_count: Count = 0
    post_volume: Count = 0
    percentage: float = 0
    history: List[HistoryPoint] = Field(default_factory=list)
    top_topics: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    pain_points: List[PainRadarPoint] = Field(default_factory=list)
    top_posts: List[RedditPost] = Field(default_factory=list)


class BrandSentiment(InsightModel):
    pos: float = 0
    neu: float = 0
    neg: float = 0


class BrandInsight(InsightModel):
    name: str = ""
    mentions: Count = 0
    yoy_growth: float = 0
    sentiment: BrandSentiment = Field(default_factory=BrandSentiment)
    top_complaints: List[str] = Field(default_factory=list)
    top_praises: List[str] = Field(default_factory=list)
    example_posts: List[RedditPost] = Field(default_factory=list)


class DashboardMetrics(InsightModel):
    total_posts_growth: float = 0
    total_posts_volume: Count = 0
    active_trends: Count = 0
    engagement_rate: float = 0
    active_users: Count = 0


class AnalysisMeta(InsightModel):
    fetched_post_count: Count = 0
    fetch_mode: str = ""
    # Epoch milliseconds, stamped when the result is finalized.
    last_updated: Optional[int] = None


class AnalysisResult(InsightModel):
    meta: AnalysisMeta = Field(default_factory=AnalysisMeta)
    metrics: DashboardMetrics
    topics: List[Topic] = Field(default_factory=list)
    subreddits: List[SubredditInsight] = Field(default_factory=list)
    pain_points: List[PainPoint] = Field(default_factory=list)
    brands: List[BrandInsight] = Field(default_factory=list)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AnalysisRunRequest(BaseModel):
    query: str = Field(min_length=1)
    force_refresh: bool = False
