from __future__ import annotations

import csv
import io
import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from reddit_insight.modules.insight.schemas import AnalysisResult, PainPoint
from reddit_insight.modules.search.schemas import SearchResult


def to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Serialize flat records to CSV text.

    The header comes from the first record's keys. Every field is quoted,
    embedded quotes are doubled and nested values are JSON-encoded.
    """
    if not records:
        return ""
    headers = list(records[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for record in records:
        writer.writerow([_cell(record.get(header)) for header in headers])
    return buffer.getvalue().rstrip("\n")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def brand_rows(result: AnalysisResult) -> List[Dict[str, Any]]:
    return [
        {
            "品牌": brand.name,
            "提及次数": brand.mentions,
            "同比增长": brand.yoy_growth,
            "正面情绪": brand.sentiment.pos,
            "中性情绪": brand.sentiment.neu,
            "负面情绪": brand.sentiment.neg,
            "主要投诉": brand.top_complaints[0] if brand.top_complaints else None,
        }
        for brand in result.brands
    ]


def pain_point_rows(
    result: AnalysisResult, topic_title: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Pain points of one topic (matched case-insensitively) or the flat list."""
    points: List[PainPoint]
    if topic_title:
        wanted = topic_title.strip().lower()
        matches = [topic for topic in result.topics if topic.title.strip().lower() == wanted]
        if not matches:
            raise LookupError(f"Topic not found: {topic_title}")
        points = matches[0].pain_points or []
    else:
        points = result.pain_points
    return [point.model_dump(mode="json", by_alias=True) for point in points]


def search_rows(question: str, result: SearchResult) -> List[Dict[str, Any]]:
    return [
        {
            "Question": question,
            "Answer": result.summary,
            "Sources": "; ".join(source.url for source in result.sources),
        }
    ]
