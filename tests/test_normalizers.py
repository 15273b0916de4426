import threading
import unittest

from cyclops_gateway.Services.gateway_core import (
    UnitTable,
    clean_title,
    coerce_number,
    sensor_fragment,
    sensor_path,
    tension_path,
    to_newtons,
)


class CleanTitleTest(unittest.TestCase):
    def test_examples(self):
        self.assertEqual(clean_title("Mast Tension #1"), "mast_tension_1")
        self.assertEqual(clean_title("PORT"), "port")
        self.assertEqual(clean_title("Port Shroud"), "port_shroud")

    def test_idempotent(self):
        for title in ("Mast Tension #1", "PORT", "Cap-Shroud (V1)", "  a  b ", "über Stag", "x_y z"):
            with self.subTest(title=title):
                once = clean_title(title)
                self.assertEqual(clean_title(once), once)

    def test_colliding_titles_share_a_fragment(self):
        self.assertEqual(clean_title("Port-Shroud"), clean_title("PortShroud"))

    def test_all_symbols(self):
        self.assertEqual(clean_title("#!?"), "")


class SensorFragmentTest(unittest.TestCase):
    def test_uses_title(self):
        self.assertEqual(sensor_fragment("Port Shroud", 3), "port_shroud")

    def test_falls_back_to_id(self):
        self.assertEqual(sensor_fragment("***", 3), "sensor_3")

    def test_falls_back_to_unknown(self):
        self.assertEqual(sensor_fragment("", None), "unknown")
        self.assertEqual(sensor_fragment(None), "unknown")

    def test_paths(self):
        self.assertEqual(sensor_path("port"), "sensors.cyclops.port")
        self.assertEqual(tension_path("port"), "rigging.port.tension")


class ToNewtonsTest(unittest.TestCase):
    def test_kg(self):
        self.assertAlmostEqual(to_newtons(10, "kg"), 98.0665)

    def test_tonne(self):
        self.assertAlmostEqual(to_newtons(1, "tonne"), 9806.65)

    def test_lbf(self):
        self.assertAlmostEqual(to_newtons(10, "lbf"), 44.4822)

    def test_pass_through(self):
        self.assertEqual(to_newtons(10, "N"), 10)
        self.assertEqual(to_newtons(10, None), 10)
        self.assertEqual(to_newtons(10, "KG"), 10)
        self.assertEqual(to_newtons(10, "daN"), 10)


class CoerceNumberTest(unittest.TestCase):
    def test_values(self):
        self.assertEqual(coerce_number("45.2"), 45.2)
        self.assertEqual(coerce_number("3,14"), 3.14)
        self.assertIsNone(coerce_number(""))
        self.assertIsNone(coerce_number("null"))
        self.assertEqual(coerce_number(7), 7)
        self.assertEqual(coerce_number("abc"), "abc")


class UnitTableTest(unittest.TestCase):
    def test_missing_entry_is_none(self):
        self.assertIsNone(UnitTable().get("port"))

    def test_last_write_wins(self):
        table = UnitTable()
        table.record("port", "kg")
        table.record("port", "lbf")
        self.assertEqual(table.get("port"), "lbf")
        self.assertEqual(len(table), 1)

    def test_snapshot_is_a_copy(self):
        table = UnitTable()
        table.record("port", "kg")
        snap = table.snapshot()
        snap["port"] = "tonne"
        self.assertEqual(table.get("port"), "kg")

    def test_concurrent_writers(self):
        table = UnitTable()

        def writer(n):
            for i in range(200):
                table.record(f"s{i}", "kg" if n % 2 else "lbf")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(table), 200)


if __name__ == "__main__":
    unittest.main()
