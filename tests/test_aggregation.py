"""Tests for the aggregation engine."""

from datetime import datetime

import pytest

from sensor_merge.core import AggregatedRecord, PandasBackend, aggregate


def _by_device(results):
    return {(r.company_id, r.device_id): r for r in results}


class TestAggregate:
    """Tests for grouping raw readings into device summaries."""

    def test_two_temperature_readings(self, make_reading):
        readings = [
            make_reading(20.0, "2024-01-01T00:00:00"),
            make_reading(22.0, "2024-01-02T00:00:00"),
        ]

        [summary] = aggregate(readings)

        assert summary.company_id == 1
        assert summary.device_id == 10
        assert summary.first_reading_at == datetime(2024, 1, 1)
        assert summary.last_reading_at == datetime(2024, 1, 2)
        assert summary.temperature_count == 2
        assert summary.average_temperature == pytest.approx(21.0)
        assert summary.humidity_count == 0
        assert summary.average_humidity is None

    def test_empty_input(self):
        assert aggregate([]) == []

    def test_mean_of_many_readings(self, make_reading):
        values = [0.1 * i for i in range(1, 51)]
        readings = [make_reading(v, datetime(2024, 1, 1, 0, i)) for i, v in enumerate(values)]

        [summary] = aggregate(readings)

        assert summary.temperature_count == len(values)
        assert summary.average_temperature == pytest.approx(sum(values) / len(values), abs=1e-9)

    def test_averages_are_null_exactly_when_counts_are_zero(self, make_reading):
        readings = [
            make_reading(50.0, is_temperature=False, is_humidity=True, device_id=1),
            make_reading(21.0, device_id=2),
            make_reading(1013.0, is_temperature=False, is_humidity=False, device_id=3),
        ]

        by_device = _by_device(aggregate(readings))

        assert by_device[(1, 1)].average_temperature is None
        assert by_device[(1, 1)].average_humidity == 50.0
        assert by_device[(1, 2)].average_humidity is None
        assert by_device[(1, 2)].average_temperature == 21.0
        assert by_device[(1, 3)].temperature_count == 0
        assert by_device[(1, 3)].humidity_count == 0
        assert by_device[(1, 3)].average_temperature is None
        assert by_device[(1, 3)].average_humidity is None

    def test_unflagged_readings_still_bound_reading_window(self, make_reading):
        readings = [
            make_reading(20.0, "2024-01-02T00:00:00"),
            make_reading(999.0, "2024-01-01T00:00:00", is_temperature=False),
            make_reading(999.0, "2024-01-05T00:00:00", is_temperature=False),
        ]

        [summary] = aggregate(readings)

        assert summary.first_reading_at == datetime(2024, 1, 1)
        assert summary.last_reading_at == datetime(2024, 1, 5)
        assert summary.temperature_count == 1
        assert summary.average_temperature == 20.0

    def test_groups_by_company_and_device(self, make_reading):
        readings = [
            make_reading(1.0, company_id=1, device_id=10),
            make_reading(2.0, company_id=2, device_id=10),
            make_reading(3.0, company_id=1, device_id=10),
        ]

        results = aggregate(readings)

        assert [(r.company_id, r.device_id, r.temperature_count) for r in results] == [
            (1, 10, 2),
            (2, 10, 1),
        ]

    def test_group_order_follows_first_occurrence(self, make_reading):
        readings = [
            make_reading(1.0, device_id=30),
            make_reading(1.0, device_id=10),
            make_reading(1.0, device_id=20),
            make_reading(1.0, device_id=10),
        ]

        assert [r.device_id for r in aggregate(readings)] == [30, 10, 20]

    def test_names_come_from_first_reading(self, make_reading):
        readings = [
            make_reading(1.0, company_name="Acme", device_name="probe-a"),
            make_reading(2.0, company_name="ACME Corp", device_name="probe-A"),
        ]

        [summary] = aggregate(readings)

        assert (summary.company_name, summary.device_name) == ("Acme", "probe-a")

    def test_permutation_does_not_change_statistics(self, make_reading):
        readings = [
            make_reading(20.0, "2024-01-03T00:00:00", device_id=1),
            make_reading(55.0, "2024-01-01T00:00:00", device_id=1, is_temperature=False, is_humidity=True),
            make_reading(18.0, "2024-01-02T00:00:00", device_id=2),
            make_reading(21.0, "2024-01-04T00:00:00", device_id=1),
            make_reading(60.0, "2024-01-05T00:00:00", device_id=2, is_temperature=False, is_humidity=True),
        ]

        def stats(results):
            return {
                key: (r.first_reading_at, r.last_reading_at, r.temperature_count, r.humidity_count,
                      r.average_temperature, r.average_humidity)
                for key, r in _by_device(results).items()
            }

        forward = stats(aggregate(readings))
        backward = stats(aggregate(list(reversed(readings))))

        assert forward.keys() == backward.keys()
        for key in forward:
            assert forward[key][:4] == backward[key][:4]
            assert forward[key][4] == pytest.approx(backward[key][4])
            assert forward[key][5] == pytest.approx(backward[key][5])

    def test_is_pure(self, make_reading):
        readings = [make_reading(20.0), make_reading(22.0, "2024-01-02T00:00:00")]

        assert aggregate(readings) == aggregate(readings)
        assert len(readings) == 2

    def test_uses_configured_backend(self, make_reading):
        class RecordingBackend(PandasBackend):
            def __init__(self):
                self.row_counts = []

            def to_dataframe(self, rows):
                frame = super().to_dataframe(rows)
                self.row_counts.append(len(frame))
                return frame

        backend = RecordingBackend()
        [summary] = aggregate([make_reading(20.0), make_reading(22.0)], backend=backend)

        assert backend.row_counts == [2]
        assert summary.temperature_count == 2

    def test_returns_plain_python_values(self, make_reading):
        [summary] = aggregate([make_reading(20.0)])

        assert isinstance(summary, AggregatedRecord)
        assert type(summary.temperature_count) is int
        assert type(summary.first_reading_at) is datetime


class TestAggregatedRecordJson:
    """Tests for the destination representation."""

    def test_canonical_field_names(self, make_reading):
        [summary] = aggregate([
            make_reading(20.0, "2024-01-01T00:00:00"),
            make_reading(22.0, "2024-01-02T00:00:00"),
        ])

        assert summary.to_json_dict() == {
            "CompanyId": 1,
            "CompanyName": "Foo1",
            "DeviceId": 10,
            "DeviceName": "ABC-100",
            "FirstReadingDtm": "2024-01-01T00:00:00",
            "LastReadingDtm": "2024-01-02T00:00:00",
            "TemperatureCount": 2,
            "AverageTemperature": 21.0,
            "HumidityCount": 0,
            "AverageHumidity": None,
        }
