import json
import threading
import unittest
from unittest import mock

import requests

from cyclops_gateway.Services.gateway_core import (
    HttpStatusError,
    PollDecodeError,
    TransportError,
)
from cyclops_gateway.Services.poller import GatewayPoller, poll_gateway


def fake_response(status_code=200, body=b"[]", reason="OK"):
    response = mock.Mock()
    response.status_code = status_code
    response.reason = reason
    response.content = body
    return response


SENSORS = json.dumps([{
    "id": 1, "title": "Port Shroud", "station": 1, "units": "kg",
    "value": "45.2", "rssi": "-60", "time": "1.0", "age": "0.2",
}]).encode("utf-8")


class PollGatewayTest(unittest.TestCase):
    def test_requests_latest_with_timeout(self):
        session = mock.Mock()
        session.get.return_value = fake_response(body=SENSORS)

        records = poll_gateway("192.168.1.50", 2.5, session=session)

        session.get.assert_called_once_with("http://192.168.1.50/latest/", timeout=2.5)
        self.assertEqual(records[0].title, "Port Shroud")

    def test_uses_requests_without_session(self):
        with mock.patch("cyclops_gateway.Services.poller.requests.get", return_value=fake_response()) as get:
            self.assertEqual(poll_gateway("gw.local", 1.0), [])
        get.assert_called_once_with("http://gw.local/latest/", timeout=1.0)

    def test_transport_errors(self):
        for exc in (requests.ConnectionError("refused"), requests.Timeout("timed out")):
            with self.subTest(exc=exc):
                session = mock.Mock()
                session.get.side_effect = exc
                with self.assertRaises(TransportError) as ctx:
                    poll_gateway("192.168.1.50", 1.0, session=session)
                self.assertIs(ctx.exception.cause, exc)

    def test_strict_status_skips_decoding(self):
        session = mock.Mock()
        session.get.return_value = fake_response(500, SENSORS, "Internal Server Error")

        with self.assertRaises(HttpStatusError) as ctx:
            poll_gateway("192.168.1.50", 1.0, session=session)

        self.assertEqual(ctx.exception.code, 500)

    def test_lenient_status_reports_and_decodes(self):
        session = mock.Mock()
        session.get.return_value = fake_response(503, SENSORS, "Service Unavailable")
        reported = []

        records = poll_gateway("192.168.1.50", 1.0, session=session,
                               lenient_status=True, on_http_error=reported.append)

        self.assertEqual(len(records), 1)
        self.assertEqual(reported[0].code, 503)

    def test_lenient_status_with_unparsable_body(self):
        session = mock.Mock()
        session.get.return_value = fake_response(500, b"<html>oops</html>", "Internal Server Error")

        with self.assertRaises(PollDecodeError):
            poll_gateway("192.168.1.50", 1.0, session=session, lenient_status=True)


class GatewayPollerTest(unittest.TestCase):
    def test_tick_swallows_errors(self):
        poller = GatewayPoller(mock.Mock(side_effect=RuntimeError("boom")), 10)
        self.assertTrue(poller.tick())
        self.assertTrue(poller.tick())
        self.assertEqual(poller.poll_once.call_count, 2)

    def test_overlapping_tick_is_skipped(self):
        release = threading.Event()
        started = threading.Event()

        def slow_poll():
            started.set()
            release.wait(5)

        poller = GatewayPoller(slow_poll, 10)
        worker = threading.Thread(target=poller.tick)
        worker.start()
        self.assertTrue(started.wait(5))

        self.assertFalse(poller.tick())

        release.set()
        worker.join(5)
        self.assertTrue(poller.tick())

    def test_polls_immediately_then_on_interval(self):
        calls = []
        enough = threading.Event()

        def poll_once():
            calls.append(1)
            if len(calls) >= 3:
                enough.set()

        poller = GatewayPoller(poll_once, 0.01)
        poller.start()
        try:
            self.assertTrue(enough.wait(5))
        finally:
            poller.stop()

        self.assertFalse(poller.running)
        count = len(calls)
        threading.Event().wait(0.05)
        self.assertEqual(len(calls), count)


if __name__ == "__main__":
    unittest.main()
