import json
import unittest

from cyclops_gateway.Services.gateway_core import PollDecodeError, parse_sensor_array


PORT_SHROUD = {
    "id": 1,
    "title": "Port Shroud",
    "station": 1,
    "units": "kg",
    "value": "45.2",
    "rssi": "-60",
    "time": "1.0",
    "age": "0.2",
}


class ParseSensorArrayTest(unittest.TestCase):
    def test_decodes_and_coerces(self):
        records = parse_sensor_array(json.dumps([PORT_SHROUD]).encode("utf-8"))

        self.assertEqual(len(records), 1)
        record = records[0]
        self.assertEqual(record.id, 1)
        self.assertEqual(record.title, "Port Shroud")
        self.assertEqual(record.station, 1)
        self.assertEqual(record.units, "kg")
        self.assertEqual(record.value, 45.2)
        self.assertEqual(record.rssi, -60)
        self.assertEqual(record.time, 1.0)
        self.assertEqual(record.age, 0.2)

    def test_string_ids_are_kept(self):
        raw = dict(PORT_SHROUD, id="A7", station="2")
        record = parse_sensor_array(json.dumps([raw]))[0]
        self.assertEqual(record.id, "A7")
        self.assertEqual(record.station, "2")

    def test_rssi_truncates_like_parse_int(self):
        record = parse_sensor_array(json.dumps([dict(PORT_SHROUD, rssi="-60.7")]))[0]
        self.assertEqual(record.rssi, -60)

    def test_optional_fields(self):
        raw = {"id": 4, "title": "Forestay", "value": 12}
        record = parse_sensor_array(json.dumps([raw]))[0]
        self.assertIsNone(record.units)
        self.assertIsNone(record.station)
        self.assertIsNone(record.rssi)

    def test_non_finite_value_rejects_record(self):
        body = json.dumps([
            dict(PORT_SHROUD, value="inf"),
            dict(PORT_SHROUD, value="NaN"),
            dict(PORT_SHROUD, value="-inf"),
            dict(PORT_SHROUD, id=2, title="Stbd Shroud"),
        ])

        self.assertEqual([r.title for r in parse_sensor_array(body)], ["Stbd Shroud"])

    def test_unreadable_optional_numbers_become_none(self):
        raw = dict(PORT_SHROUD, rssi="n/a", time="inf", age="nan")
        record = parse_sensor_array(json.dumps([raw]))[0]

        self.assertIsNone(record.rssi)
        self.assertIsNone(record.time)
        self.assertIsNone(record.age)
        self.assertEqual(record.value, 45.2)

    def test_empty_array(self):
        self.assertEqual(parse_sensor_array(b"[]"), [])

    def test_invalid_records_are_skipped(self):
        body = json.dumps([
            {"title": "No id", "value": "1"},
            dict(PORT_SHROUD, value="not a number"),
            "not an object",
            dict(PORT_SHROUD, id=2, title="Stbd Shroud"),
        ])

        records = parse_sensor_array(body)

        self.assertEqual([r.title for r in records], ["Stbd Shroud"])

    def test_not_json(self):
        with self.assertRaises(PollDecodeError):
            parse_sensor_array(b"<html>Internal Server Error</html>")

    def test_not_an_array(self):
        with self.assertRaises(PollDecodeError):
            parse_sensor_array(b'{"error": "busy"}')


if __name__ == "__main__":
    unittest.main()
