import json
import os
import tempfile
import unittest
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from unittest import mock

import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gigboard.config import Settings
from gigboard.core.normalize import Job
from gigboard.core.posting import PostingForm
from gigboard.db.models import Base, Vacancy
from gigboard.providers import (
    REGISTRY,
    DatabaseJobSource,
    FileJobSource,
    JobSourceError,
    RestJobSource,
    build_source,
    get,
    register,
)
from gigboard.providers.rest import rows_to_jobs


class FakeResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


class FakeHttp:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def row(i):
    return {"UNIQUE_ID": f"job-{i}", "Title": f"Gig {i}", "Company": "Acme", "Summary": None}


class RowsToJobsTests(unittest.TestCase):
    def test_backend_columns_are_mapped(self):
        jobs = rows_to_jobs(
            [{"UNIQUE_ID": "1", "Title": "Python dev", "URL": "https://x", "rate": "50", "created_at": "2025-09-18T10:00:00Z"}],
            source="test",
        )
        self.assertEqual(jobs[0].id, "1")
        self.assertEqual(jobs[0].title, "Python dev")
        self.assertEqual(jobs[0].url, "https://x")
        self.assertEqual(jobs[0].summary, "")
        self.assertEqual(jobs[0].created_at.year, 2025)

    def test_non_object_rows_are_skipped(self):
        with self.assertLogs("gigboard.providers.rest", level="WARNING"):
            jobs = rows_to_jobs([row(1), "junk", 3], source="test")
        self.assertEqual(len(jobs), 1)

    def test_loose_column_types_are_coerced(self):
        jobs = rows_to_jobs(
            [{"UNIQUE_ID": "a", "tags": ["python", "remote"], "added_by": 42, "source": None, "rate": 55}],
            source="rest",
        )
        self.assertEqual(len(jobs), 1)
        self.assertEqual(jobs[0].tags, "python, remote")
        self.assertEqual(jobs[0].added_by, "42")
        self.assertIsNone(jobs[0].source)
        self.assertEqual(jobs[0].rate, "55")

    def test_rows_failing_validation_are_skipped(self):
        def validate(data):
            if data.get("UNIQUE_ID") == "bad":
                return PostingForm.model_validate({})
            return Job.model_validate(data)

        with mock.patch("gigboard.providers.rest.Job") as job_model:
            job_model.model_validate.side_effect = validate
            with self.assertLogs("gigboard.providers.rest", level="WARNING"):
                jobs = rows_to_jobs([{"UNIQUE_ID": "bad"}, row(1)], source="test")
        self.assertEqual([j.id for j in jobs], ["job-1"])

    def test_non_list_payload(self):
        with self.assertRaises(JobSourceError):
            rows_to_jobs({"message": "nope"}, source="test")


class RestJobSourceTests(unittest.TestCase):
    def test_fetches_in_batches(self):
        http = FakeHttp([FakeResponse([row(1), row(2)]), FakeResponse([row(3)])])
        source = RestJobSource("https://db.example.com/", "secret", "vacancies", batch=2, session=http)
        jobs = source.fetch_all_jobs()

        self.assertEqual([j.id for j in jobs], ["job-1", "job-2", "job-3"])
        self.assertEqual(len(http.calls), 2)
        first = http.calls[0]
        self.assertEqual(first["url"], "https://db.example.com/rest/v1/vacancies")
        self.assertEqual(first["params"], {"select": "*", "limit": 2, "offset": 0})
        self.assertEqual(first["headers"]["Range"], "0-1")
        self.assertEqual(first["headers"]["apikey"], "secret")
        self.assertEqual(first["headers"]["Authorization"], "Bearer secret")
        self.assertEqual(http.calls[1]["headers"]["Range"], "2-3")
        self.assertEqual(http.calls[1]["params"]["offset"], 2)

    def test_full_last_batch_asks_once_more(self):
        http = FakeHttp([FakeResponse([row(1), row(2)]), FakeResponse([])])
        jobs = RestJobSource("https://db.example.com", batch=2, session=http).fetch_all_jobs()
        self.assertEqual(len(jobs), 2)
        self.assertEqual(len(http.calls), 2)
        self.assertNotIn("apikey", http.calls[0]["headers"])

    def test_server_ignoring_range_sends_everything(self):
        http = FakeHttp([FakeResponse([row(1), row(2), row(3)])] * 5)
        with self.assertLogs("gigboard.providers.rest", level="WARNING"):
            jobs = RestJobSource("https://db.example.com", batch=2, session=http).fetch_all_jobs()
        self.assertEqual(len(http.calls), 1)
        self.assertEqual([j.id for j in jobs], ["job-1", "job-2", "job-3"])

    def test_server_repeating_the_same_page_stops(self):
        http = FakeHttp([FakeResponse([row(1), row(2)])] * 5)
        with self.assertLogs("gigboard.providers.rest", level="WARNING"):
            jobs = RestJobSource("https://db.example.com", batch=2, session=http).fetch_all_jobs()
        self.assertEqual(len(http.calls), 2)
        self.assertEqual([j.id for j in jobs], ["job-1", "job-2"])

    def test_repeated_rows_without_ids_stop(self):
        blank = {"Title": "No id"}
        http = FakeHttp([FakeResponse([blank, blank])] * 5)
        with self.assertLogs("gigboard.providers.rest", level="WARNING"):
            jobs = RestJobSource("https://db.example.com", batch=2, session=http).fetch_all_jobs()
        self.assertEqual(len(http.calls), 2)
        self.assertEqual(len(jobs), 2)

    def test_network_error(self):
        http = FakeHttp([requests.ConnectionError("refused")])
        with self.assertRaises(JobSourceError):
            RestJobSource("https://db.example.com", session=http).fetch_all_jobs()

    def test_http_error(self):
        http = FakeHttp([FakeResponse([], status_code=500)])
        with self.assertRaises(JobSourceError):
            RestJobSource("https://db.example.com", session=http).fetch_all_jobs()

    def test_bad_json(self):
        http = FakeHttp([FakeResponse(ValueError("not json"))])
        with self.assertRaises(JobSourceError):
            RestJobSource("https://db.example.com", session=http).fetch_all_jobs()

    def test_needs_url(self):
        with self.assertRaises(JobSourceError):
            RestJobSource("")


class FileJobSourceTests(unittest.TestCase):
    def write(self, payload):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False, encoding="utf-8") as f:
            f.write(payload)
        self.addCleanup(os.unlink, f.name)
        return f.name

    def test_reads_wrapped_list(self):
        path = self.write(json.dumps({"jobs": [row(1), row(2)]}))
        self.assertEqual(len(FileJobSource(path).fetch_all_jobs()), 2)

    def test_reads_plain_list(self):
        path = self.write(json.dumps([row(1)]))
        self.assertEqual(FileJobSource(path).fetch_all_jobs()[0].id, "job-1")

    def test_missing_file(self):
        with self.assertRaises(JobSourceError):
            FileJobSource("/nonexistent/jobs.json").fetch_all_jobs()

    def test_invalid_json(self):
        path = self.write("{not json")
        with self.assertRaises(JobSourceError):
            FileJobSource(path).fetch_all_jobs()


class DatabaseJobSourceTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self.SessionLocal = sessionmaker(bind=self.engine)

    def factory(self):
        @contextmanager
        def session_scope():
            with self.SessionLocal() as session:
                yield session
        return session_scope

    def test_reads_newest_first(self):
        Base.metadata.create_all(self.engine)
        with self.SessionLocal() as session:
            session.add_all([
                Vacancy(unique_id="old", title="Old gig", created_at=datetime(2025, 9, 1)),
                Vacancy(unique_id="new", title="New gig", created_at=datetime(2025, 9, 10)),
            ])
            session.commit()
        jobs = DatabaseJobSource(self.factory()).fetch_all_jobs()
        self.assertEqual([j.id for j in jobs], ["new", "old"])

    def test_database_errors_become_source_errors(self):
        # no tables created
        with self.assertRaises(JobSourceError):
            DatabaseJobSource(self.factory()).fetch_all_jobs()


class BuildSourceTests(unittest.TestCase):
    def setUp(self):
        self.settings = Settings.from_env()

    def test_file_source(self):
        source = build_source(replace(self.settings, source="file", jobs_file="export.json"))
        self.assertIsInstance(source, FileJobSource)
        self.assertEqual(source.path.name, "export.json")

    def test_rest_source(self):
        settings = replace(self.settings, source="rest", rest_url="https://db.example.com", rest_table="t")
        source = build_source(settings)
        self.assertIsInstance(source, RestJobSource)
        self.assertEqual(source.endpoint, "https://db.example.com/rest/v1/t")

    def test_database_source(self):
        self.assertIsInstance(build_source(replace(self.settings, source="database")), DatabaseJobSource)

    def test_registry_lookup(self):
        factory = get("file")
        self.assertIsInstance(factory(replace(self.settings, jobs_file="x.json")), FileJobSource)
        with self.assertRaises(KeyError):
            get("ftp")

    def test_registered_factory_is_built(self):
        built = []
        register("memory", lambda s: built.append(s.source) or FileJobSource("mem.json"))
        self.addCleanup(REGISTRY.pop, "memory", None)
        source = build_source(replace(self.settings, source="memory"))
        self.assertIsInstance(source, FileJobSource)
        self.assertEqual(built, ["memory"])

    def test_unknown_source(self):
        with self.assertRaises(JobSourceError):
            build_source(replace(self.settings, source="ftp"))


if __name__ == "__main__":
    unittest.main()
