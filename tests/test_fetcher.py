import unittest

import httpx

from shopsync.errors import FatalAPIError, ThrottleError, TransientFetchError
from shopsync.pipeline.context import SyncTuning
from shopsync.pipeline.fetcher import execute_query, fetch_all_pages
from shopsync.pipeline.queries import CUSTOMERS_QUERY

from fakes import ScriptedSource, SleepRecorder, page, http_status_error

THROTTLED = {"errors": [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]}


class FetchAllPagesTests(unittest.TestCase):
    def test_nodes_keep_page_order_and_cursor_chain(self):
        source = ScriptedSource([
            page("customers", [{"id": "1"}, {"id": "2"}], has_next=True, cursor="a"),
            page("customers", [], has_next=True, cursor="b"),
            page("customers", [{"id": "3"}, {"id": "4"}, {"id": "5"}], has_next=False, cursor="c"),
        ])
        sleep = SleepRecorder()
        nodes = fetch_all_pages(source, CUSTOMERS_QUERY, "customers", 50, sleep=sleep)
        self.assertEqual([n["id"] for n in nodes], ["1", "2", "3", "4", "5"])
        self.assertEqual([c["cursor"] for c in source.calls], [None, "a", "b"])
        self.assertTrue(all(c["first"] == 50 for c in source.calls))
        # delay only between pages, never after the last one
        self.assertEqual(sleep.calls, [0.5, 0.5])

    def test_single_empty_page(self):
        source = ScriptedSource([page("orders", [])])
        sleep = SleepRecorder()
        self.assertEqual(fetch_all_pages(source, "orders(", "orders", 25, sleep=sleep), [])
        self.assertEqual(sleep.calls, [])

    def test_throttle_retries_same_cursor(self):
        source = ScriptedSource([
            page("customers", [{"id": "1"}], has_next=True, cursor="a"),
            THROTTLED,
            page("customers", [{"id": "2"}], has_next=False),
        ])
        sleep = SleepRecorder()
        nodes = fetch_all_pages(source, CUSTOMERS_QUERY, "customers", 50, sleep=sleep)
        self.assertEqual([n["id"] for n in nodes], ["1", "2"])
        self.assertEqual([c["cursor"] for c in source.calls], [None, "a", "a"])
        self.assertEqual(sleep.calls, [0.5, 2.0])

    def test_missing_connection_is_fatal(self):
        source = ScriptedSource([{"data": {}}])
        with self.assertRaises(FatalAPIError):
            fetch_all_pages(source, CUSTOMERS_QUERY, "customers", 50, sleep=SleepRecorder())


class ExecuteQueryTests(unittest.TestCase):
    def test_transport_failure_exhausts_after_four_attempts(self):
        source = ScriptedSource([httpx.ConnectError("boom") for _ in range(5)])
        sleep = SleepRecorder()
        with self.assertRaises(TransientFetchError):
            execute_query(source, CUSTOMERS_QUERY, {"cursor": None}, SyncTuning(), sleep)
        self.assertEqual(len(source.calls), 4)
        self.assertEqual(sleep.calls, [2.0, 4.0, 8.0])

    def test_throttle_exhaustion_raises_throttle_error(self):
        source = ScriptedSource([THROTTLED] * 5)
        sleep = SleepRecorder()
        with self.assertRaises(ThrottleError):
            execute_query(source, CUSTOMERS_QUERY, {}, SyncTuning(), sleep)
        self.assertEqual(len(source.calls), 4)

    def test_other_api_error_is_fatal_without_retry(self):
        source = ScriptedSource([{"errors": [{"message": "Field 'x' doesn't exist"}]}])
        sleep = SleepRecorder()
        with self.assertRaises(FatalAPIError):
            execute_query(source, CUSTOMERS_QUERY, {}, SyncTuning(), sleep)
        self.assertEqual(len(source.calls), 1)
        self.assertEqual(sleep.calls, [])

    def test_recovers_after_bad_status(self):
        ok = page("customers", [{"id": "1"}])
        source = ScriptedSource([http_status_error(503), ok])
        sleep = SleepRecorder()
        self.assertEqual(execute_query(source, CUSTOMERS_QUERY, {}, SyncTuning(), sleep), ok)
        self.assertEqual(sleep.calls, [2.0])

    def test_retry_ceiling_is_configurable(self):
        source = ScriptedSource([httpx.ReadTimeout("slow")] * 3)
        tuning = SyncTuning(fetch_retries=1, fetch_backoff_base_seconds=0.5)
        sleep = SleepRecorder()
        with self.assertRaises(TransientFetchError):
            execute_query(source, CUSTOMERS_QUERY, {}, tuning, sleep)
        self.assertEqual(len(source.calls), 2)
        self.assertEqual(sleep.calls, [0.5])


if __name__ == "__main__":
    unittest.main()
