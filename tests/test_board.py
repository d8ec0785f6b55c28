import unittest
from dataclasses import replace
from unittest import mock

from gigboard.config import Settings
from gigboard.core import board as board_module
from gigboard.core.board import JobBoard
from gigboard.core.normalize import Job
from gigboard.filters.pipeline import PillConflictError
from gigboard.filters.taxonomy import Industry
from gigboard.providers import JobSourceError


def sample_jobs():
    return [
        Job(id="a", title="Python developer", company="Acme", location="Remote", summary="Django and pandas"),
        Job(id="b", title="Data engineer", company="Food Co", location="Remote", summary="python pipelines with pandas"),
        Job(id="c", title="Logo design", company="Yum", location="Remote", summary="branding for a food startup"),
        Job(id="d", title="Brand design", company="Food Co", location="Amsterdam", summary="figma work"),
        Job(id="e", title="Food photographer", location="Amsterdam"),
    ]


class StaticSource:
    name = "static"

    def __init__(self, jobs):
        self.jobs = jobs
        self.calls = 0

    def fetch_all_jobs(self):
        self.calls += 1
        return list(self.jobs)


class BrokenSource:
    name = "broken"

    def fetch_all_jobs(self):
        raise JobSourceError("backend down")


class RecordingActivity:
    def __init__(self):
        self.calls = []

    def log_search(self, include_pills, exclude_pills):
        self.calls.append((list(include_pills), list(exclude_pills)))


class FailingActivity:
    def log_search(self, include_pills, exclude_pills):
        raise RuntimeError("log table missing")


class JobBoardTests(unittest.TestCase):
    def setUp(self):
        self.settings = replace(Settings.from_env(), page_size=2, page_window=10)
        self.activity = RecordingActivity()
        self.board = JobBoard(jobs=sample_jobs(), settings=self.settings, activity=self.activity)

    def test_initial_views(self):
        self.assertEqual(len(self.board.filtered_jobs), 5)
        self.assertEqual(self.board.total_pages, 3)
        self.assertEqual([j.id for j in self.board.paginated_jobs], ["a", "b"])
        self.assertEqual([f.industry for f in self.board.facets], [Industry.PYTHON, Industry.DESIGN])

    def test_paging_is_clamped(self):
        self.assertEqual(self.board.set_page(99), 2)
        self.assertEqual([j.id for j in self.board.paginated_jobs], ["e"])
        self.assertEqual(self.board.next_page(), 2)
        self.assertEqual(self.board.prev_page(), 1)
        self.assertEqual(self.board.first_page(), 0)
        self.assertEqual(self.board.prev_page(), 0)
        self.assertEqual(self.board.last_page(), 2)

    def test_filter_change_resets_page(self):
        self.board.set_page(2)
        self.board.add_exclude_pill("figma")
        self.assertEqual(self.board.page, 0)
        self.assertEqual(self.board.page_info.page, 0)
        self.assertEqual(len(self.board.filtered_jobs), 4)

    def test_set_filters_accepts_single_strings(self):
        self.assertTrue(self.board.set_filters("remote", "python"))
        self.assertEqual(self.board.state.include_pills, ("remote",))
        self.assertEqual([j.id for j in self.board.filtered_jobs], ["c"])

    def test_noop_change_keeps_page(self):
        self.board.set_page(1)
        self.assertFalse(self.board.add_exclude_pill("   "))
        self.assertFalse(self.board.remove_include_pill("nothing"))
        self.assertEqual(self.board.page, 1)

    def test_views_are_memoised(self):
        with mock.patch.object(board_module, "filter_with_stats", wraps=board_module.filter_with_stats) as spy:
            self.board.filtered_jobs
            self.board.paginated_jobs
            self.board.set_page(1)
            self.board.pipeline_stats
            self.assertEqual(spy.call_count, 1)
            self.board.add_include_pill("remote")
            self.board.filtered_jobs
            self.assertEqual(spy.call_count, 2)
            self.board.set_jobs(sample_jobs())
            self.board.filtered_jobs
            self.assertEqual(spy.call_count, 3)

    def test_include_pills_are_logged(self):
        self.board.add_include_pill(" Remote ")
        self.board.add_exclude_pill("python")
        self.board.remove_include_pill("remote")
        self.assertEqual(self.activity.calls, [(["remote"], []), ([], ["python"])])

    def test_logging_failure_keeps_the_change(self):
        board = JobBoard(jobs=sample_jobs(), settings=self.settings, activity=FailingActivity())
        with self.assertLogs("gigboard.activity", level="WARNING"):
            self.assertTrue(board.add_include_pill("remote"))
        self.assertEqual(board.state.include_pills, ("remote",))
        self.assertEqual([j.id for j in board.filtered_jobs], ["a", "b", "c"])

    def test_conflicting_pill_is_rejected(self):
        self.board.add_include_pill("python")
        with self.assertRaises(PillConflictError):
            self.board.add_exclude_pill("Python")
        self.assertEqual(self.board.state.exclude_pills, ())

    def test_select_industry_and_refine(self):
        industry = self.board.select_industry("design")
        self.assertIs(industry, Industry.DESIGN)
        self.assertEqual(self.board.state.include_pills, ("design",))
        self.assertEqual(self.board.state.selected_industry, "Design")
        self.assertIn("figma", self.board.industry_keywords())

        self.assertTrue(self.board.toggle_excluded_term("figma"))
        self.assertEqual([j.id for j in self.board.filtered_jobs], ["c"])
        self.assertTrue(self.board.toggle_excluded_term("figma"))
        self.assertEqual([j.id for j in self.board.filtered_jobs], ["c", "d"])

        self.board.toggle_excluded_term("food")
        self.board.remove_include_pill("design")
        self.assertIsNone(self.board.state.selected_industry)
        self.assertEqual(self.board.state.excluded_terms, ())
        self.assertEqual(len(self.board.filtered_jobs), 5)

    def test_clearing_filters(self):
        self.board.select_industry("Design")
        self.board.toggle_excluded_term("figma")
        self.board.add_exclude_pill("yum")
        self.board.set_page(0)

        self.assertTrue(self.board.clear_excluded_terms())
        self.assertEqual(self.board.state.selected_industry, "Design")
        self.assertTrue(self.board.remove_exclude_pill("YUM"))
        self.assertFalse(self.board.remove_exclude_pill("yum"))
        self.assertTrue(self.board.clear_industry())
        self.assertIsNone(self.board.state.selected_industry)
        self.assertEqual(self.board.state.include_pills, ("design",))
        self.assertEqual([j.id for j in self.board.filtered_jobs], ["c", "d"])

    def test_unknown_industry(self):
        with self.assertRaises(ValueError):
            self.board.select_industry("Gardening")
        self.assertFalse(self.board.toggle_excluded_term("food"))

    def test_quick_search_ignores_pills(self):
        self.board.add_exclude_pill("python")
        hits = self.board.quick_search("python developer", limit=1)
        self.assertEqual(len(hits), 1)
        self.assertEqual(hits[0].item.id, "a")
        self.assertIs(self.board.industry_of(hits[0].item), Industry.PYTHON)


class RefreshTests(unittest.TestCase):
    def setUp(self):
        self.settings = replace(Settings.from_env(), page_size=2)

    def test_refresh_replaces_snapshot(self):
        source = StaticSource(sample_jobs())
        board = JobBoard(source, settings=self.settings)
        self.assertTrue(board.refresh())
        self.assertEqual(len(board.jobs), 5)
        self.assertFalse(board.loading)
        self.assertIsNone(board.last_error)
        self.assertEqual(source.calls, 1)

    def test_failed_refresh_keeps_previous_jobs(self):
        board = JobBoard(BrokenSource(), jobs=sample_jobs(), settings=self.settings)
        board.set_page(1)
        with self.assertLogs("gigboard.core.board", level="WARNING"):
            self.assertFalse(board.refresh())
        self.assertEqual(len(board.jobs), 5)
        self.assertEqual(board.page, 1)
        self.assertFalse(board.loading)
        self.assertIn("backend down", board.last_error)

    def test_refresh_without_source(self):
        board = JobBoard(settings=self.settings)
        self.assertFalse(board.refresh())
        self.assertEqual(board.filtered_jobs, [])
        self.assertEqual(board.paginated_jobs, [])
        self.assertEqual(board.facets, [])


if __name__ == "__main__":
    unittest.main()
