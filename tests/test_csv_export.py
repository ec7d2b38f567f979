import unittest

from reddit_insight.modules.insight.schemas import AnalysisResult
from reddit_insight.modules.search.schemas import SearchResult, SearchSource
from reddit_insight.reporting.csv_export import (
    brand_rows,
    pain_point_rows,
    search_rows,
    to_csv,
)


def _result():
    point = {
        "id": "pp-1",
        "title": "续航短",
        "severity": 20,
        "frequency": 18,
        "recency": 12,
        "unmetNeed": 10,
        "totalScore": 60,
        "quotes": ['It said "8 hours"', "lasted 2"],
    }
    return AnalysisResult.model_validate(
        {
            "metrics": {"totalPostsVolume": 100},
            "topics": [{"title": "Battery Life", "painPoints": [point]}],
            "painPoints": [point, {**point, "id": "pp-2", "title": "太重"}],
            "brands": [
                {
                    "name": "Anker",
                    "mentions": 40,
                    "yoyGrowth": 5.5,
                    "sentiment": {"pos": 60, "neu": 30, "neg": 10},
                    "topComplaints": ["slow support", "heavy"],
                },
                {"name": "Baseus", "mentions": 12},
            ],
        }
    )


class ToCsvTest(unittest.TestCase):
    def test_quotes_every_field_and_doubles_quotes(self):
        text = to_csv([{"a": 'say "hi"', "b": 1}, {"a": None, "b": "x,y"}])
        self.assertEqual(text, '"a","b"\n"say ""hi""","1"\n"","x,y"')

    def test_nested_values_are_json(self):
        text = to_csv([{"tags": ["x", "y"], "meta": {"k": "值"}}])
        self.assertEqual(
            text.splitlines()[1], '"[""x"", ""y""]","{""k"": ""值""}"'
        )

    def test_empty(self):
        self.assertEqual(to_csv([]), "")

    def test_header_from_first_record(self):
        text = to_csv([{"a": 1}, {"a": 2, "extra": 3}])
        self.assertEqual(text, '"a"\n"1"\n"2"')


class RowBuilderTest(unittest.TestCase):
    def test_brand_rows(self):
        rows = brand_rows(_result())
        self.assertEqual(
            list(rows[0]),
            ["品牌", "提及次数", "同比增长", "正面情绪", "中性情绪", "负面情绪", "主要投诉"],
        )
        self.assertEqual(rows[0]["主要投诉"], "slow support")
        self.assertIsNone(rows[1]["主要投诉"])
        self.assertIn('"Anker","40","5.5","60.0","30.0","10.0","slow support"', to_csv(rows))

    def test_pain_point_rows(self):
        result = _result()
        self.assertEqual([row["id"] for row in pain_point_rows(result)], ["pp-1", "pp-2"])
        topic_rows = pain_point_rows(result, topic_title="battery life")
        self.assertEqual([row["id"] for row in topic_rows], ["pp-1"])
        self.assertEqual(topic_rows[0]["unmetNeed"], 10)
        with self.assertRaises(LookupError):
            pain_point_rows(result, topic_title="Price")

    def test_search_rows(self):
        result = SearchResult(
            summary="答案",
            sources=[SearchSource(title="A", url="u1"), SearchSource(title="B", url="u2")],
        )
        text = to_csv(search_rows("best?", result))
        self.assertEqual(text, '"Question","Answer","Sources"\n"best?","答案","u1; u2"')


if __name__ == "__main__":
    unittest.main()
