import unittest

from gigboard.core.normalize import Job
from gigboard.search.fuzzy import (
    BASE_THRESHOLD,
    JOB_SEARCH_FIELDS,
    STRICT_THRESHOLD,
    RapidFuzzSearcher,
    score_cutoff,
)


class ScoreCutoffTests(unittest.TestCase):
    def test_threshold_maps_to_cutoff(self):
        self.assertAlmostEqual(score_cutoff(STRICT_THRESHOLD), 80.0)
        self.assertAlmostEqual(score_cutoff(BASE_THRESHOLD), 60.0)
        self.assertAlmostEqual(score_cutoff(0), 100.0)

    def test_out_of_range_is_clamped(self):
        self.assertAlmostEqual(score_cutoff(-1), 100.0)
        self.assertAlmostEqual(score_cutoff(5), 0.0)

    def test_strict_is_stricter_than_base(self):
        self.assertGreater(score_cutoff(STRICT_THRESHOLD), score_cutoff(BASE_THRESHOLD))


class RapidFuzzSearcherTests(unittest.TestCase):
    def setUp(self):
        self.searcher = RapidFuzzSearcher()
        self.jobs = [
            Job(id="a", title="Python developer", company="Acme", location="Remote"),
            Job(id="b", title="Food photographer", location="Amsterdam"),
            Job(id="c", title="Brand design", summary="figma work"),
        ]

    def test_typo_still_matches(self):
        hits = self.searcher.search(self.jobs, JOB_SEARCH_FIELDS, "pyhton developer", STRICT_THRESHOLD)
        self.assertEqual(hits[0].item.id, "a")
        self.assertEqual(hits[0].field, "title")
        self.assertNotIn("b", [h.item.id for h in hits])

    def test_partial_word_matches_field(self):
        hits = self.searcher.search(self.jobs, JOB_SEARCH_FIELDS, "develper", STRICT_THRESHOLD)
        self.assertIn("a", [h.item.id for h in hits])

    def test_results_sorted_by_score(self):
        hits = self.searcher.search(self.jobs, JOB_SEARCH_FIELDS, "design", BASE_THRESHOLD)
        scores = [h.score for h in hits]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(hits[0].item.id, "c")

    def test_short_field_inside_query_is_not_a_hit(self):
        jobs = [
            Job(id="mkt", title="Digital marketing lead", company="Acme"),
            Job(id="ing", title="Backend developer", company="ING"),
            Job(id="it", title="Nurse", company="IT"),
        ]
        hits = self.searcher.search(jobs, JOB_SEARCH_FIELDS, "digital marketing", STRICT_THRESHOLD)
        self.assertEqual([h.item.id for h in hits], ["mkt"])
        self.assertLess(RapidFuzzSearcher.score_field("digital marketing", "ing"), 50)

    def test_whole_short_field_still_matches(self):
        self.assertGreaterEqual(RapidFuzzSearcher.score_field("amsterdam", "amsterdam"), 100)
        self.assertGreater(RapidFuzzSearcher.score_field("amsterdamm", "amsterdam"), 80)

    def test_blank_query_returns_nothing(self):
        self.assertEqual(self.searcher.search(self.jobs, JOB_SEARCH_FIELDS, "   ", BASE_THRESHOLD), [])
        self.assertEqual(self.searcher.search(self.jobs, JOB_SEARCH_FIELDS, "!!", BASE_THRESHOLD), [])

    def test_searches_dicts_too(self):
        rows = [{"title": "Python developer"}, {"title": None}]
        hits = self.searcher.search(rows, ["title"], "python", STRICT_THRESHOLD)
        self.assertEqual(len(hits), 1)
        self.assertEqual(hits[0].score, 100.0)


if __name__ == "__main__":
    unittest.main()
