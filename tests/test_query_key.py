import unittest

from reddit_insight.core.utils import DEFAULT_CACHE_NAMESPACE, cache_key, normalize_query


class QueryKeyTest(unittest.TestCase):
    def test_edge_whitespace_and_case_collapse(self):
        self.assertEqual(
            cache_key("iphone battery"), cache_key("  iPhone Battery ")
        )
        self.assertEqual(cache_key("iphone battery"), "reddit_insight_iphone battery")

    def test_no_deeper_folding(self):
        self.assertNotEqual(cache_key("iphone battery"), cache_key("iphone batteries"))
        self.assertNotEqual(cache_key("iphone battery"), cache_key("iphone  battery"))

    def test_normalize_is_idempotent(self):
        for query in ["  Mixed CASE  ", "already normal", "\tTabs\n", "", "户外 露营"]:
            once = normalize_query(query)
            self.assertEqual(normalize_query(once), once)

    def test_namespace_prefix(self):
        self.assertTrue(cache_key("x").startswith(DEFAULT_CACHE_NAMESPACE))
        self.assertEqual(cache_key(" X ", namespace="other:"), "other:x")


if __name__ == "__main__":
    unittest.main()
