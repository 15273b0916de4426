import unittest

from cyclops_gateway.Core.config import Settings


class SettingsTest(unittest.TestCase):
    def test_defaults(self):
        config = Settings(GATEWAY_IP="192.168.1.50")

        self.assertEqual(config.POLL_INTERVAL_MS, 10000)
        self.assertEqual(config.UDP_PORT, 50000)
        self.assertTrue(config.udp_enabled)
        self.assertEqual(config.http_timeout_s, 10.0)
        self.assertEqual(config.poll_url, "http://192.168.1.50/latest/")

    def test_zero_port_disables_udp(self):
        self.assertFalse(Settings(UDP_PORT=0).udp_enabled)

    def test_non_positive_interval_falls_back(self):
        self.assertEqual(Settings(POLL_INTERVAL_MS=0).POLL_INTERVAL_MS, 10000)
        self.assertEqual(Settings(POLL_INTERVAL_MS=-5).POLL_INTERVAL_MS, 10000)

    def test_explicit_timeout(self):
        config = Settings(POLL_INTERVAL_MS=1000, HTTP_TIMEOUT_S=0.5)
        self.assertEqual(config.poll_interval_s, 1.0)
        self.assertEqual(config.http_timeout_s, 0.5)

    def test_gateway_ip_is_stripped(self):
        self.assertEqual(Settings(GATEWAY_IP="  gw.local ").GATEWAY_IP, "gw.local")


if __name__ == "__main__":
    unittest.main()
