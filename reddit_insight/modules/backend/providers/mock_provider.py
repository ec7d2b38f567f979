from __future__ import annotations

import hashlib
import json
import random
import re
from typing import Any, Dict, List

from reddit_insight.core.types import Citation, GroundedReply

_QUOTED = re.compile(r'"([^"]+)"')
_MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]
_RADAR_AXES = ["严重程度", "频率", "时效性", "未满足度"]


class MockResearchBackend:
    """Offline backend producing stable canned data for a query.

    The same prompt subject always yields the same numbers, which keeps demos
    and local runs reproducible without a credential.
    """

    provider_id = "mock"

    async def complete_grounded(self, prompt: str, model: str) -> GroundedReply:
        subject = self._subject(prompt)
        slug = re.sub(r"[^a-z0-9]+", "_", subject.lower()).strip("_") or "topic"
        return GroundedReply(
            text=(
                f"[{model}] Reddit threads about {subject} cluster in "
                f"r/{slug}, r/BuyItForLife and r/Frugal; users mostly discuss "
                "price, durability and customer support."
            ),
            citations=[
                Citation(
                    uri=f"https://www.reddit.com/r/{slug}/comments/{index}/",
                    title=f"{subject} discussion #{index}",
                )
                for index in range(1, 4)
            ],
        )

    async def complete_json(self, prompt: str, model: str) -> str:
        subject = self._subject(prompt)
        if "JSON array of strings" in prompt:
            return json.dumps(
                [f"{subject} review", f"{subject} price", f"{subject} alternatives",
                 f"{subject} problems", f"best {subject}"],
                ensure_ascii=False,
            )
        return json.dumps(self._analysis(subject), ensure_ascii=False)

    @staticmethod
    def _subject(prompt: str) -> str:
        match = _QUOTED.search(prompt)
        return match.group(1).strip() if match else "market"

    def _analysis(self, subject: str) -> Dict[str, Any]:
        seed = int(hashlib.sha256(subject.lower().encode("utf-8")).hexdigest()[:8], 16)
        rng = random.Random(seed)
        topics = [self._topic(rng, subject, index) for index in range(1, 5)]
        return {
            "meta": {"fetchedPostCount": 100, "fetchMode": "fixed-newest-100"},
            "metrics": {
                "totalPostsGrowth": round(rng.uniform(-10, 40), 1),
                "totalPostsVolume": rng.randint(800, 12000),
                "activeTrends": sum(1 for topic in topics if topic["growth"] > 0),
                "engagementRate": round(rng.uniform(2, 15), 1),
                "activeUsers": rng.randint(5000, 250000),
            },
            "subreddits": [
                {
                    "name": name,
                    "memberCount": rng.randint(10000, 3000000),
                    "postVolume": volume,
                    "percentage": volume,
                    "history": self._history(rng),
                    "topTopics": [topic["title"] for topic in topics[:2]],
                    "brands": ["BrandA", "BrandB"],
                    "painPoints": [
                        {"subject": axis, "A": rng.randint(5, 25), "fullMark": 25}
                        for axis in _RADAR_AXES
                    ],
                    "topPosts": [self._post(rng, subject, name)],
                }
                for name, volume in (("r/BuyItForLife", 45), ("r/Frugal", 35), ("r/reviews", 20))
            ],
            "topics": topics,
            "brands": [
                self._brand(rng, subject, name)
                for name in ("BrandA", "BrandB", "BrandC")
            ],
        }

    def _topic(self, rng: random.Random, subject: str, index: int) -> Dict[str, Any]:
        pain_points = []
        for point_index in range(1, 3):
            scores = [rng.randint(5, 25) for _ in range(4)]
            pain_points.append(
                {
                    "id": f"pp-{index}-{point_index}",
                    "title": f"{subject} 痛点 {index}.{point_index}",
                    "severity": scores[0],
                    "frequency": scores[1],
                    "recency": scores[2],
                    "unmetNeed": scores[3],
                    "totalScore": sum(scores),
                    "quotes": [f"I wish {subject} lasted longer."],
                }
            )
        return {
            "title": f"{subject.title()} theme {index}",
            "growth": round(rng.uniform(-20, 60), 1),
            "volume": rng.randint(50, 2000),
            "sentiment": rng.randint(20, 90),
            "history": self._history(rng),
            "brands": ["BrandA"],
            "painPoints": pain_points,
            "userPersona": {
                "type": "价格敏感型用户",
                "motivation": "寻找性价比",
                "complaints": "质量不稳定",
                "scenario": "日常使用",
                "severity": "中等",
                "tone": "理性",
            },
            "topPosts": [self._post(rng, subject, "r/BuyItForLife")],
        }

    def _brand(self, rng: random.Random, subject: str, name: str) -> Dict[str, Any]:
        pos = rng.randint(20, 60)
        neg = rng.randint(5, 100 - pos)
        return {
            "name": name,
            "mentions": rng.randint(10, 400),
            "yoyGrowth": round(rng.uniform(-30, 80), 1),
            "sentiment": {"pos": pos, "neu": 100 - pos - neg, "neg": neg},
            "topComplaints": ["售后响应慢"],
            "topPraises": ["做工扎实"],
            "examplePosts": [self._post(rng, subject, "r/reviews")],
        }

    @staticmethod
    def _post(rng: random.Random, subject: str, subreddit: str) -> Dict[str, Any]:
        post_id = rng.randint(100000, 999999)
        return {
            "title": f"Is {subject} worth it?",
            "url": f"https://www.reddit.com/{subreddit}/comments/{post_id}/",
            "snippet": f"Been using {subject} for a year, here is my take.",
            "summary_cn": f"用户分享了使用 {subject} 一年的体验。",
            "subreddit": subreddit,
            "upvotes": rng.randint(5, 5000),
            "comments": rng.randint(0, 800),
            "date": f"2025-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}",
            "sentiment": rng.choice(["positive", "neutral", "negative"]),
        }

    @staticmethod
    def _history(rng: random.Random) -> List[Dict[str, Any]]:
        return [{"month": month, "value": rng.randint(10, 300)} for month in _MONTHS]
