import asyncio
import json
import random
import unittest

from reddit_insight.config import CardinalityCaps
from reddit_insight.core.errors import MalformedResponse, UpstreamError, ValidationError
from reddit_insight.core.types import Citation, GroundedReply
from reddit_insight.infra.kv.store import MemoryKeyValueStore
from reddit_insight.modules.backend.providers.mock_provider import MockResearchBackend
from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.service import InsightService


def _post(index):
    return {"title": f"post {index}", "url": f"https://www.reddit.com/r/x/{index}"}


def _pain_point(topic_index, index):
    return {
        "id": f"pp-{topic_index}-{index}",
        "title": f"痛点 {topic_index}.{index}",
        "severity": 20,
        "frequency": 15,
        "recency": 10,
        "unmetNeed": 5,
        "totalScore": 50,
    }


def _document(topics=2, pain_points=2, posts=1, subreddits=2, brands=2, brand_posts=1):
    return {
        "meta": {"fetchedPostCount": 100, "fetchMode": "fixed-newest-100"},
        "metrics": {
            "totalPostsGrowth": 12.5,
            "totalPostsVolume": 2850.0,
            "activeTrends": 3,
            "engagementRate": 8.2,
            "activeUsers": "14,000",
        },
        "topics": [
            {
                "title": f"Topic {t}",
                "growth": 10,
                "volume": 100,
                "sentiment": 60,
                "painPoints": [_pain_point(t, p) for p in range(pain_points)],
                "topPosts": [_post(p) for p in range(posts)],
            }
            for t in range(topics)
        ],
        "subreddits": [{"name": f"r/sub{s}", "postVolume": 10} for s in range(subreddits)],
        "brands": [
            {
                "name": f"Brand {b}",
                "mentions": 10,
                "sentiment": {"pos": 50, "neu": 30, "neg": 20},
                "examplePosts": [_post(p) for p in range(brand_posts)],
            }
            for b in range(brands)
        ],
    }


class FakeBackend:
    provider_id = "fake"

    def __init__(self, json_reply, grounded_error=None, json_error=None):
        self.json_reply = json_reply
        self.grounded_error = grounded_error
        self.json_error = json_error
        self.grounded_prompts = []
        self.json_prompts = []

    async def complete_grounded(self, prompt, model):
        self.grounded_prompts.append(prompt)
        if self.grounded_error is not None:
            raise self.grounded_error
        return GroundedReply(
            text="CONTEXT: people complain about chargers.",
            citations=[Citation(uri="https://www.reddit.com/r/x/1", title="t")],
        )

    async def complete_json(self, prompt, model):
        self.json_prompts.append(prompt)
        if self.json_error is not None:
            raise self.json_error
        return self.json_reply


class InsightServiceTest(unittest.TestCase):
    def _service(self, backend, store=None, caps=None, clock=lambda: 1700000000000):
        cache = AnalysisCache(store if store is not None else MemoryKeyValueStore())
        return InsightService(
            backend=backend, model="test-model", cache=cache, caps=caps, clock=clock
        )

    def test_runs_both_stages_and_caches(self):
        store = MemoryKeyValueStore()
        backend = FakeBackend(json.dumps(_document()))
        service = self._service(backend, store)

        result = asyncio.run(service.analyze("Power Bank"))

        self.assertEqual(len(backend.grounded_prompts), 1)
        self.assertEqual(len(backend.json_prompts), 1)
        grounding = backend.grounded_prompts[0]
        self.assertIn('"Power Bank"', grounding)
        self.assertIn("site:reddit.com", grounding)
        self.assertIn("last 12 months", grounding)
        synthesis = backend.json_prompts[0]
        self.assertIn("CONTEXT: people complain about chargers.", synthesis)
        self.assertIn("'topics': Max 4 items", synthesis)
        self.assertIn("'examplePosts' inside brands: Max 1 item(s)", synthesis)

        self.assertEqual(result.metrics.total_posts_volume, 2850)
        self.assertEqual(result.metrics.active_users, 14000)
        self.assertIsNotNone(store.read("reddit_insight_power bank"))

    def test_cache_hit_skips_backend(self):
        backend = FakeBackend(json.dumps(_document()))
        service = self._service(backend)
        first = asyncio.run(service.analyze("power bank"))

        second = asyncio.run(service.analyze("  POWER BANK "))

        self.assertEqual(first, second)
        self.assertEqual(len(backend.grounded_prompts), 1)
        self.assertEqual(len(backend.json_prompts), 1)

    def test_force_refresh_overwrites_entry(self):
        store = MemoryKeyValueStore()
        ticks = iter([1, 2])
        backend = FakeBackend(json.dumps(_document(topics=1)))
        service = self._service(backend, store, clock=lambda: next(ticks))
        asyncio.run(service.analyze("q"))

        backend.json_reply = json.dumps(_document(topics=3))
        refreshed = asyncio.run(service.analyze("q", force_refresh=True))

        self.assertEqual(len(backend.grounded_prompts), 2)
        self.assertEqual(len(refreshed.topics), 3)
        cached = service.cache.get("q")
        self.assertEqual(cached.meta.last_updated, 2)
        self.assertEqual(len(cached.topics), 3)

    def test_clock_stamp_replaces_model_value(self):
        document = _document()
        document["meta"]["lastUpdated"] = 42
        service = self._service(FakeBackend(json.dumps(document)))

        result = asyncio.run(service.analyze("q"))

        self.assertEqual(result.meta.last_updated, 1700000000000)
        self.assertEqual(result.meta.fetched_post_count, 100)

    def test_fenced_reply_is_extracted(self):
        reply = "Here you go:\n```json\n" + json.dumps(_document()) + "\n```"
        result = asyncio.run(self._service(FakeBackend(reply)).analyze("q"))
        self.assertEqual(len(result.topics), 2)

    def test_malformed_reply_aborts_without_caching(self):
        store = MemoryKeyValueStore()
        service = self._service(FakeBackend("Sorry, I cannot help with that."), store)

        with self.assertRaises(MalformedResponse) as ctx:
            asyncio.run(service.analyze("q"))

        self.assertEqual(ctx.exception.raw_text, "Sorry, I cannot help with that.")
        self.assertEqual(store.keys(), [])

    def test_missing_metrics_is_malformed(self):
        document = _document()
        del document["metrics"]
        store = MemoryKeyValueStore()
        service = self._service(FakeBackend(json.dumps(document)), store)

        with self.assertRaises(MalformedResponse):
            asyncio.run(service.analyze("q"))
        self.assertEqual(store.keys(), [])

    def test_infinite_counts_are_malformed(self):
        for reply in (
            '{"metrics": {"totalPostsVolume": "inf"}}',
            '{"metrics": {"activeUsers": 1e999}}',
            '{"metrics": {"activeTrends": Infinity}}',
        ):
            with self.subTest(reply=reply):
                store = MemoryKeyValueStore()
                service = self._service(FakeBackend(reply), store)
                with self.assertRaises(MalformedResponse):
                    asyncio.run(service.analyze("q"))
                self.assertEqual(store.keys(), [])

    def test_non_object_reply_is_malformed(self):
        service = self._service(FakeBackend("[1, 2, 3]"))
        with self.assertRaises(MalformedResponse):
            asyncio.run(service.analyze("q"))

    def test_grounding_failure_skips_synthesis(self):
        backend = FakeBackend("{}", grounded_error=UpstreamError("network down"))
        store = MemoryKeyValueStore()
        service = self._service(backend, store)

        with self.assertRaises(UpstreamError):
            asyncio.run(service.analyze("q"))

        self.assertEqual(backend.json_prompts, [])
        self.assertEqual(store.keys(), [])

    def test_synthesis_failure_keeps_previous_entry(self):
        store = MemoryKeyValueStore()
        backend = FakeBackend(json.dumps(_document()))
        service = self._service(backend, store)
        asyncio.run(service.analyze("q"))
        before = store.read("reddit_insight_q")

        backend.json_error = UpstreamError("quota")
        with self.assertRaises(UpstreamError):
            asyncio.run(service.analyze("q", force_refresh=True))

        self.assertEqual(store.read("reddit_insight_q"), before)

    def test_blank_query_rejected(self):
        backend = FakeBackend("{}")
        with self.assertRaises(ValidationError):
            asyncio.run(self._service(backend).analyze("   "))
        self.assertEqual(backend.grounded_prompts, [])

    def test_flat_pain_points_filled_from_topics(self):
        service = self._service(FakeBackend(json.dumps(_document(topics=2, pain_points=2))))
        result = asyncio.run(service.analyze("q"))
        self.assertEqual(
            [point.id for point in result.pain_points],
            ["pp-0-0", "pp-0-1", "pp-1-0", "pp-1-1"],
        )

    def test_explicit_flat_pain_points_are_kept(self):
        document = _document()
        document["painPoints"] = [_pain_point(9, 9)]
        result = asyncio.run(self._service(FakeBackend(json.dumps(document))).analyze("q"))
        self.assertEqual([point.id for point in result.pain_points], ["pp-9-9"])

    def test_caps_hold_for_oversized_replies(self):
        caps = CardinalityCaps()
        rng = random.Random(7)
        for _ in range(25):
            document = _document(
                topics=rng.randint(0, 8),
                pain_points=rng.randint(0, 6),
                posts=rng.randint(0, 6),
                subreddits=rng.randint(0, 6),
                brands=rng.randint(0, 8),
                brand_posts=rng.randint(0, 3),
            )
            service = self._service(FakeBackend(json.dumps(document)), caps=caps)
            result = asyncio.run(service.analyze("q"))

            self.assertLessEqual(len(result.topics), caps.topics)
            self.assertLessEqual(len(result.subreddits), caps.subreddits)
            self.assertLessEqual(len(result.brands), caps.brands)
            for topic in result.topics:
                self.assertLessEqual(len(topic.pain_points or []), caps.pain_points_per_topic)
                self.assertLessEqual(len(topic.top_posts or []), caps.posts_per_topic)
            for brand in result.brands:
                self.assertLessEqual(len(brand.example_posts), caps.posts_per_brand)

    def test_mock_backend_end_to_end(self):
        store = MemoryKeyValueStore()
        service = InsightService(
            backend=MockResearchBackend(),
            model="mock-research",
            cache=AnalysisCache(store),
        )

        first = asyncio.run(service.analyze("standing desk"))
        second = asyncio.run(service.analyze("Standing Desk", force_refresh=True))

        self.assertEqual(len(first.topics), 4)
        self.assertEqual(len(first.pain_points), 8)
        self.assertGreater(first.metrics.total_posts_volume, 0)
        # Same subject, same numbers.
        self.assertEqual(first.metrics, second.metrics)
        self.assertEqual(store.keys(), ["reddit_insight_standing desk"])


if __name__ == "__main__":
    unittest.main()
