import asyncio
import unittest

from reddit_insight.core.errors import UpstreamError
from reddit_insight.core.types import Citation, GroundedReply
from reddit_insight.modules.search.service import SearchService, collect_sources


class FakeBackend:
    provider_id = "fake"

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def complete_grounded(self, prompt, model):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def complete_json(self, prompt, model):
        raise AssertionError("search never asks for structured output")


class CollectSourcesTest(unittest.TestCase):
    def test_first_occurrence_wins(self):
        citations = [
            Citation(uri="a", title="A1"),
            Citation(uri="b", title="B"),
            Citation(uri="a", title="A2"),
            Citation(uri="c", title="C"),
        ]
        sources = collect_sources(citations)
        self.assertEqual([(s.url, s.title) for s in sources], [("a", "A1"), ("b", "B"), ("c", "C")])

    def test_capped_at_five_unique(self):
        citations = [Citation(uri=f"https://r/{i % 7}", title=str(i)) for i in range(20)]
        sources = collect_sources(citations)
        self.assertEqual([s.url for s in sources], [f"https://r/{i}" for i in range(5)])

    def test_skips_missing_urls_and_defaults_title(self):
        sources = collect_sources([Citation(uri="", title="x"), Citation(uri="u", title="")])
        self.assertEqual([(s.url, s.title) for s in sources], [("u", "Source")])


class SearchServiceTest(unittest.TestCase):
    def test_summary_and_sources_from_citations(self):
        reply = GroundedReply(
            text="用户普遍认为续航最重要。 See https://not-a-citation.example",
            citations=[
                Citation(uri="https://www.reddit.com/r/a/1", title="A"),
                Citation(uri="https://www.reddit.com/r/a/1", title="A again"),
            ],
        )
        backend = FakeBackend(reply=reply)
        result = asyncio.run(SearchService(backend, "m").search("best power bank?"))

        self.assertTrue(result.summary.startswith("用户普遍认为"))
        self.assertEqual([s.url for s in result.sources], ["https://www.reddit.com/r/a/1"])
        self.assertIn('"best power bank?"', backend.prompts[0])

    def test_upstream_error_propagates(self):
        backend = FakeBackend(error=UpstreamError("boom"))
        with self.assertRaises(UpstreamError):
            asyncio.run(SearchService(backend, "m").search("q"))


if __name__ == "__main__":
    unittest.main()
