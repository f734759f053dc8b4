"""
Dry-Running a Mapping Against a Sample
Use case: Check a new feed's mapping before adding it to a merge configuration.
- Collects every rule error with its path
- Traces which source locations emitted a reading and what the record context held
"""

from sensor_merge import dry_run, validate_mapping

mapping = {
    "site": {
        "customer": "CompanyId",
        "customer_name": "CompanyName",
        "probes": {
            "serial": "DeviceId",
            "label": "DeviceName",
            "isTemperature": "kind == t",
            "isHumidity": "kind == rh",
            "samples": {"ts": "Dtm", "reading": "Value"},
        },
    }
}

sample = {
    "site": {
        "customer": 7,
        "customer_name": "ColdStore",
        "probes": [
            {"serial": 700, "label": "freezer-1", "kind": "t",
             "samples": [{"ts": "2025-11-11T12:00:00Z", "reading": -18.2},
                         {"ts": "2025-11-11T12:05:00Z", "reading": -18.6}]},
            {"serial": 701, "label": "dock", "kind": "rh",
             "samples": [{"ts": "2025-11-11T12:00:00Z", "reading": 71}]},
        ],
    }
}


def main():
    ok, errs = validate_mapping(mapping)
    if not ok:
        raise SystemExit("Invalid mapping:\n- " + "\n- ".join(errs))

    result = dry_run(mapping, sample)
    print("ok:", result["ok"], "records:", result.get("records"))
    for emission in result.get("trace", []):
        print(emission["path"], emission["context"])

    broken = dict(mapping, site=dict(mapping["site"], probes=dict(mapping["site"]["probes"], isHumidity="kind = rh")))
    print(validate_mapping(broken))


if __name__ == "__main__":
    main()
