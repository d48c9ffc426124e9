import json

import pytest

ACCOUNTS = {
    "123456789012": {"stage": "dev", "zone": "dev.example.com"},
    "210987654321": {
        "stage": "prod",
        "replicas": 3,
        "features": ["search", "billing"],
        "limits": {"rps": 50.0, "burst": 1.5},
        "maintenance": False,
    },
}


class FakeZoneLookup:
    """Records lookups and answers from a fixed table."""

    def __init__(self, zones=None):
        self.zones = zones if zones is not None else {"example.com": "ZEXAMPLE123"}
        self.calls = []

    def __call__(self, zone_name):
        from blueprints.errors import ZoneNotFoundError

        self.calls.append(zone_name)
        if zone_name not in self.zones:
            raise ZoneNotFoundError(zone_name)
        return self.zones[zone_name]


@pytest.fixture
def zone_lookup():
    return FakeZoneLookup()


@pytest.fixture
def context_file(tmp_path):
    path = tmp_path / "cdk.context.json"
    path.write_text(json.dumps(ACCOUNTS), encoding="utf-8")
    return path


@pytest.fixture
def site_source(tmp_path):
    source = tmp_path / "website"
    source.mkdir()
    (source / "index.html").write_text("<html><body>hello</body></html>", encoding="utf-8")
    return source
