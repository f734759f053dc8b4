"""Pytest configuration and fixtures."""

import json
from datetime import datetime

import pytest

from sensor_merge.core import RawRecord


@pytest.fixture
def partner_mapping():
    """Mapping for feeds nested as partner -> trackers -> sensors -> crumbs."""
    return {
        "PartnerId": "CompanyId",
        "PartnerName": "CompanyName",
        "Trackers": {
            "Id": "DeviceId",
            "Model": "DeviceName",
            "Sensors": {
                "isTemperature": "Name == Temperature",
                "isHumidity": "Name == Humidity",
                "Crumbs": {
                    "CreatedDtm": "Dtm",
                    "Value": "Value",
                },
            },
        },
    }


@pytest.fixture
def partner_document():
    return [
        {
            "PartnerId": 1,
            "PartnerName": "Foo1",
            "Trackers": [
                {
                    "Id": 10,
                    "Model": "ABC-100",
                    "Sensors": [
                        {
                            "Name": "Temperature",
                            "Crumbs": [
                                {"CreatedDtm": "2024-01-01T00:00:00", "Value": 20.0},
                                {"CreatedDtm": "2024-01-02T00:00:00", "Value": 22.0},
                            ],
                        },
                        {
                            "Name": "Humidity",
                            "Crumbs": [
                                {"CreatedDtm": "2024-01-01T12:00:00", "Value": 55.0},
                            ],
                        },
                    ],
                }
            ],
        }
    ]


@pytest.fixture
def company_mapping():
    """Mapping for feeds nested as company -> devices -> sensor data."""
    return {
        "CompanyId": "CompanyId",
        "Company": "CompanyName",
        "Devices": {
            "DeviceID": "DeviceId",
            "Name": "DeviceName",
            "SensorData": {
                "isTemperature": "SensorType == TEMP",
                "isHumidity": "SensorType == HUM",
                "DateTime": "Dtm",
                "Value": "Value",
            },
        },
    }


@pytest.fixture
def company_document():
    return {
        "CompanyId": 2,
        "Company": "Foo2",
        "Devices": [
            {
                "DeviceID": 20,
                "Name": "XYZ-200",
                "SensorData": [
                    {"SensorType": "TEMP", "DateTime": "2024-01-03T08:00:00", "Value": "18.5"},
                    {"SensorType": "HUM", "DateTime": "2024-01-03T09:00:00", "Value": 40},
                    {"SensorType": "TEMP", "DateTime": "2024-01-01T08:00:00Z", "Value": 19.5},
                ],
            }
        ],
    }


@pytest.fixture
def merge_config(partner_mapping, company_mapping):
    """One merge operation over both feeds."""
    return [
        {
            "operation": "merge",
            "sources": [
                {"file": "foo1.json", "transformation": "foo1"},
                {"file": "foo2.json", "transformation": "foo2"},
            ],
            "transformations": [
                {"id": "foo1", "mapping": partner_mapping},
                {"id": "foo2", "mapping": company_mapping},
            ],
            "destination": "out/summary.json",
        }
    ]


@pytest.fixture
def data_dir(tmp_path, partner_document, company_document, merge_config):
    """Data directory holding both feeds and the configuration file."""
    (tmp_path / "foo1.json").write_text(json.dumps(partner_document), encoding="utf-8")
    (tmp_path / "foo2.json").write_text(json.dumps(company_document), encoding="utf-8")
    (tmp_path / "config.json").write_text(json.dumps(merge_config), encoding="utf-8")
    return tmp_path


@pytest.fixture
def make_reading():
    """Factory for raw readings with sensible defaults."""
    def _make(value, created_at="2024-01-01T00:00:00", *, company_id=1, device_id=10,
              is_temperature=True, is_humidity=False, company_name="Foo1", device_name="ABC-100"):
        return RawRecord(
            company_id=company_id,
            company_name=company_name,
            device_id=device_id,
            device_name=device_name,
            is_temperature=is_temperature,
            is_humidity=is_humidity,
            created_at=created_at if isinstance(created_at, datetime) else datetime.fromisoformat(created_at),
            value=value,
        )
    return _make
