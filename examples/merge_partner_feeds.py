"""
Merging Two Partner Sensor Feeds
Use case: Two upstream systems report the same kind of telemetry with different field names and nesting.
- Feed A nests partner -> trackers -> sensors -> crumbs; the sensor type lives one level above the readings
- Feed B nests company -> devices -> sensor data; every reading carries its own type
- Derived 'is*' flags classify readings as temperature or humidity
- Both feeds are aggregated into one summary per (company, device)
"""

import json
import logging
from pathlib import Path
from tempfile import TemporaryDirectory

from sensor_merge import EngineConfig, MergeOrchestrator, parse_operations, validate_operations

config_json = r'''
[
  {
    "operation": "merge",
    "sources": [
      { "file": "feed_a.json", "transformation": "partners" },
      { "file": "feed_b.json", "transformation": "companies" }
    ],
    "transformations": [
      {
        "id": "partners",
        "mapping": {
          "PartnerId": "CompanyId",
          "PartnerName": "CompanyName",
          "Trackers": {
            "Id": "DeviceId",
            "Model": "DeviceName",
            "Sensors": {
              "isTemperature": "Name == Temperature",
              "isHumidity": "Name == Humidity",
              "Crumbs": { "CreatedDtm": "Dtm", "Value": "Value" }
            }
          }
        }
      },
      {
        "id": "companies",
        "mapping": {
          "CompanyId": "CompanyId",
          "Company": "CompanyName",
          "Devices": {
            "DeviceID": "DeviceId",
            "Name": "DeviceName",
            "SensorData": {
              "isTemperature": "SensorType == TEMP",
              "isHumidity": "SensorType == HUM",
              "DateTime": "Dtm",
              "Value": "Value"
            }
          }
        }
      }
    ],
    "destination": "summary.json"
  }
]
'''

feed_a_json = r'''
[
  {
    "PartnerId": 1,
    "PartnerName": "Foo1",
    "Trackers": [
      {
        "Id": 1,
        "Model": "ABC-100",
        "Sensors": [
          { "Name": "Temperature", "Crumbs": [
              { "CreatedDtm": "2020-08-17T10:35:00", "Value": 22.15 },
              { "CreatedDtm": "2020-08-17T10:40:00", "Value": 23.45 } ] },
          { "Name": "Humidity", "Crumbs": [
              { "CreatedDtm": "2020-08-17T10:35:00", "Value": 81.5 } ] }
        ]
      }
    ]
  }
]
'''

feed_b_json = r'''
[
  {
    "CompanyId": 2,
    "Company": "Foo2",
    "Devices": [
      {
        "DeviceID": 2,
        "Name": "XYZ-200",
        "SensorData": [
          { "SensorType": "TEMP", "DateTime": "2020-08-18T10:35:00Z", "Value": 32.55 },
          { "SensorType": "HUM", "DateTime": "2020-08-18T10:40:00Z", "Value": "60.4" }
        ]
      }
    ]
  }
]
'''

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    config = json.loads(config_json)

    ok, errs = validate_operations(config)
    if not ok:
        raise SystemExit("Invalid configuration:\n- " + "\n- ".join(errs))

    with TemporaryDirectory() as tmp:
        data_dir = Path(tmp)
        (data_dir / "feed_a.json").write_text(feed_a_json, encoding="utf-8")
        (data_dir / "feed_b.json").write_text(feed_b_json, encoding="utf-8")

        orchestrator = MergeOrchestrator(EngineConfig(data_dir=data_dir))
        for op in parse_operations(config):
            for summary in orchestrator.run_operation(op):
                print(summary.to_json_dict())

        print((data_dir / "summary.json").read_text(encoding="utf-8"))
