import threading
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from cyclops_gateway.main import app, _parse_origins
from cyclops_gateway.Core.config import settings


class ApiTest(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.object(settings, "GATEWAY_IP", "")
        patcher.start()
        self.addCleanup(patcher.stop)

        self.client = TestClient(app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_api_info(self):
        body = self.client.get("/api").json()
        self.assertEqual(body["status"], "online")
        self.assertIn("/deltas", body["features"]["websockets"])

    def test_status_shows_missing_gateway(self):
        body = self.client.get("/gateway/status").json()
        self.assertEqual(body["error"], "No gateway IP defined.")
        self.assertFalse(body["polling"])
        self.assertFalse(body["udp_listening"])

    def test_manual_poll_refused_without_gateway(self):
        gateway = app.state.gateway
        with mock.patch("cyclops_gateway.Services.gateway.poll_gateway") as poll:
            response = self.client.post("/gateway/poll")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"], "No gateway IP defined.")
        poll.assert_not_called()
        body = self.client.get("/gateway/status").json()
        self.assertEqual(body["error"], "No gateway IP defined.")
        self.assertFalse(body["started"])
        self.assertEqual(gateway.counters["polls_failed"], 0)

    def test_manual_poll_accepted_when_running(self):
        gateway = app.state.gateway
        ticked = threading.Event()
        with mock.patch.object(gateway, "started", True), \
                mock.patch.object(gateway.poller, "tick", side_effect=ticked.set):
            response = self.client.post("/gateway/poll")
            self.assertTrue(ticked.wait(5))

        self.assertEqual(response.status_code, 202)

    def test_units_snapshot(self):
        app.state.gateway.unit_table.record("port_shroud", "kg")

        body = self.client.get("/gateway/units").json()

        self.assertEqual(body, {"units": {"port_shroud": "kg"}, "count": 1})

    def test_deltas_websocket_receives_sentence(self):
        with self.client.websocket_connect("/deltas") as ws:
            app.state.gateway.handle_datagram(b"$CRXDR,C,0.65,C,PORT*5B\r\n", ("10.0.0.2", 50000))
            delta = ws.receive_json()

        self.assertEqual(delta["context"], "vessels.self")
        self.assertEqual(delta["updates"][0]["values"], [{"path": "rigging.port.tension", "value": 0.65}])


class ParseOriginsTest(unittest.TestCase):
    def test_values(self):
        self.assertEqual(_parse_origins("*"), (True, ["*"]))
        self.assertEqual(_parse_origins("https://a.com, https://b.com"), (False, ["https://a.com", "https://b.com"]))
        self.assertEqual(_parse_origins(""), (False, []))


if __name__ == "__main__":
    unittest.main()
