"""Cached two-stage Reddit market analysis."""

from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.service import InsightService

__all__ = ["AnalysisCache", "InsightService"]
