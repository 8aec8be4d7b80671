# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import threading
import time
import unittest
from dataclasses import dataclass

import httpx

from netadapter.config import HttpSettings
from netadapter.errors import ErrorKind
from netadapter.http.adapters import StubTransport
from netadapter.http.endpoint import Endpoint
from netadapter.http.httpx_client import HttpxTransport
from netadapter.http.models import HttpParams, Method, TransferConfig
from netadapter.models import Failure, Success
from netadapter.service import NetworkService

BASE_URL = "https://api.example.com"


@dataclass
class Ping:
    ok: bool


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class OutcomeRecorder:
    def __init__(self):
        self.outcomes = []
        self.threads = []
        self.event = threading.Event()

    def __call__(self, outcome):
        self.outcomes.append(outcome)
        self.threads.append(threading.current_thread().name)
        self.event.set()


class TestCallbackDelivery(unittest.TestCase):
    def setUp(self):
        self.stub = StubTransport()
        self.service = NetworkService(self.stub, settings=HttpSettings(), max_workers=1)

    def tearDown(self):
        self.service.close()

    def test_success_is_delivered_once_on_worker_thread(self):
        self.stub.add(f"{BASE_URL}/ping", b'{"ok":true}', 200)
        recorder = OutcomeRecorder()

        task = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/ping"), recorder, type_=Ping)

        self.assertIsNotNone(task)
        self.assertTrue(task.wait(timeout=5))
        self.assertTrue(task.done())
        self.service.close()
        self.assertEqual(len(recorder.outcomes), 1)
        outcome = recorder.outcomes[0]
        self.assertIsInstance(outcome, Success)
        self.assertEqual(outcome.value, Ping(ok=True))
        self.assertEqual(outcome.status_code, 200)
        self.assertTrue(recorder.threads[0].startswith("netadapter"))

    def test_validation_failure_is_delivered_as_failure(self):
        self.stub.add(f"{BASE_URL}/ping", b'{"error":"not found"}', 404)
        recorder = OutcomeRecorder()

        task = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/ping"), recorder, type_=Ping)
        task.wait(timeout=5)

        outcome = recorder.outcomes[0]
        self.assertIsInstance(outcome, Failure)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.status_code, 404)
        self.assertEqual(outcome.error.data, b'{"error":"not found"}')
        with self.assertRaises(Exception) as ctx:
            outcome.unwrap()
        self.assertIs(ctx.exception, outcome.error)

    def test_malformed_endpoint_returns_no_handle(self):
        recorder = OutcomeRecorder()

        task = self.service.submit_request(Endpoint(Method.GET, "not a url", "/ping"), recorder)

        self.assertIsNone(task)
        self.assertEqual(len(recorder.outcomes), 1)
        self.assertTrue(recorder.outcomes[0].error.is_empty)
        self.assertEqual(self.stub.call_count, 0)

    def test_upload_without_body_returns_no_handle(self):
        recorder = OutcomeRecorder()
        endpoint = Endpoint(Method.POST, BASE_URL, "/upload")

        task = self.service.submit_request(endpoint, recorder, config=TransferConfig(use_upload=True))

        self.assertIsNone(task)
        self.assertEqual(recorder.outcomes[0].error.kind, ErrorKind.PRECONDITION)
        self.assertEqual(self.stub.call_count, 0)

    def test_cancel_right_after_dispatch_delivers_single_failure(self):
        self.stub.add(f"{BASE_URL}/slow", block_until_cancelled=True)
        recorder = OutcomeRecorder()

        task = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/slow"), recorder)
        task.cancel()

        self.assertTrue(task.wait(timeout=5))
        task.cancel()
        self.service.close()
        self.assertEqual(len(recorder.outcomes), 1)
        outcome = recorder.outcomes[0]
        self.assertIsInstance(outcome, Failure)
        self.assertEqual(outcome.error.kind, ErrorKind.CANCELLED)
        self.assertIsNone(outcome.error.status_code)
        self.assertTrue(task.cancelled)

    def test_cancel_of_queued_call_fires_callback_immediately(self):
        self.stub.add(f"{BASE_URL}/slow", block_until_cancelled=True)
        self.stub.add(f"{BASE_URL}/ping", b"{}", 200)
        first = OutcomeRecorder()
        second = OutcomeRecorder()

        running = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/slow"), first)
        self.assertTrue(wait_until(lambda: self.stub.call_count == 1))
        queued = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/ping"), second)
        queued.cancel()

        self.assertTrue(queued.done())
        self.assertEqual(second.outcomes[0].error.kind, ErrorKind.CANCELLED)

        running.cancel()
        self.assertTrue(running.wait(timeout=5))
        self.service.close()
        self.assertEqual(len(first.outcomes), 1)
        self.assertEqual(len(second.outcomes), 1)
        self.assertEqual([call.request.url for call in self.stub.calls], [f"{BASE_URL}/slow"])

    def test_cancel_after_completion_is_noop(self):
        self.stub.add(f"{BASE_URL}/ping", b"{}", 200)
        recorder = OutcomeRecorder()

        task = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/ping"), recorder)
        task.wait(timeout=5)
        task.cancel()
        task.cancel()

        self.assertEqual(len(recorder.outcomes), 1)
        self.assertIsInstance(recorder.outcomes[0], Success)
        self.assertFalse(task.cancelled)

    def test_callback_exceptions_are_logged(self):
        self.stub.add(f"{BASE_URL}/ping", b"{}", 200)
        done = threading.Event()

        def callback(outcome):
            done.set()
            raise ValueError("callback bug")

        with self.assertLogs("netadapter.service", level=logging.ERROR) as logs:
            task = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/ping"), callback)
            task.wait(timeout=5)

        self.assertTrue(done.is_set())
        self.assertIn("callback raised", logs.output[0])

    def test_fetch_and_download_callbacks(self):
        import tempfile
        from pathlib import Path

        self.stub.add("https://cdn.example.com/empty", b"", 200)
        self.stub.add("https://cdn.example.com/file", b"bytes", 200)
        fetched = OutcomeRecorder()
        downloaded = OutcomeRecorder()

        with tempfile.TemporaryDirectory() as tmp:
            destination = Path(tmp) / "file"
            self.service.submit_fetch_file("https://cdn.example.com/empty", fetched).wait(timeout=5)
            self.service.submit_download_file("https://cdn.example.com/file", destination, downloaded).wait(timeout=5)
            self.assertEqual(destination.read_bytes(), b"bytes")

        self.assertIsNone(fetched.outcomes[0].value)
        self.assertIs(downloaded.outcomes[0].value, True)
        self.assertIsNone(self.service.submit_fetch_file("not a url", fetched))
        self.assertIsNone(self.service.submit_download_file("not a url", "/tmp/x", downloaded))
        self.assertEqual(len(fetched.outcomes), 2)
        self.assertEqual(len(downloaded.outcomes), 2)

    def test_dispatch_uses_endpoint_snapshot(self):
        self.stub.add(f"{BASE_URL}/a", b"A", 200)
        self.stub.add(f"{BASE_URL}/b", b"B", 200)
        recorder = OutcomeRecorder()
        endpoint = Endpoint(Method.GET, BASE_URL, "/a", HttpParams())

        task = self.service.submit_request(endpoint, recorder)
        endpoint.path = "/b"
        task.wait(timeout=5)

        self.assertEqual(recorder.outcomes[0].value, b"A")


class TestCancellationOverHttpx(unittest.TestCase):
    def setUp(self):
        self.entered = threading.Event()
        self.release = threading.Event()

        def handler(request):
            self.entered.set()
            self.release.wait(timeout=5)
            return httpx.Response(200, content=b"late")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        self.service = NetworkService(HttpxTransport(HttpSettings(), client=client), max_workers=1)

    def tearDown(self):
        self.release.set()
        self.service.close()

    def test_cancel_while_waiting_for_headers_delivers_immediately(self):
        recorder = OutcomeRecorder()

        task = self.service.submit_request(Endpoint(Method.GET, BASE_URL, "/slow"), recorder)
        self.assertTrue(self.entered.wait(timeout=5))
        task.cancel()

        self.assertTrue(task.wait(0.5))
        self.assertEqual(len(recorder.outcomes), 1)
        self.assertEqual(recorder.outcomes[0].error.kind, ErrorKind.CANCELLED)

        self.release.set()
        self.service.close()
        self.assertEqual(len(recorder.outcomes), 1)


class TestSubmitAfterClose(unittest.TestCase):
    def test_submit_after_close_delivers_failure(self):
        stub = StubTransport()
        stub.add(f"{BASE_URL}/ping", b"{}", 200)
        service = NetworkService(stub, settings=HttpSettings(), max_workers=1)
        service.close()
        recorder = OutcomeRecorder()

        task = service.submit_request(Endpoint(Method.GET, BASE_URL, "/ping"), recorder)

        self.assertIsNone(task)
        self.assertEqual(len(recorder.outcomes), 1)
        self.assertEqual(recorder.outcomes[0].error.kind, ErrorKind.PRECONDITION)
        self.assertIsInstance(recorder.outcomes[0].error.error, RuntimeError)
        self.assertEqual(stub.call_count, 0)
