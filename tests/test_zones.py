import logging

import boto3
import pytest
from botocore.stub import Stubber

from blueprints.errors import ZoneNotFoundError
from blueprints.website.zones import Route53ZoneLookup


def zone(zone_id, name="example.com.", private=False):
    return {
        "Id": f"/hostedzone/{zone_id}",
        "Name": name,
        "CallerReference": f"ref-{zone_id}",
        "Config": {"PrivateZone": private},
    }


class TestRoute53ZoneLookup:
    def setup_method(self):
        self.client = boto3.client(
            "route53",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        self.stubber = Stubber(self.client)
        self.lookup = Route53ZoneLookup(client=self.client)

    def teardown_method(self):
        self.stubber.deactivate()

    def _respond(self, zones, expected=None, **page):
        response = {"HostedZones": zones, "IsTruncated": False, "MaxItems": "100"}
        response.update(page)
        self.stubber.add_response(
            "list_hosted_zones_by_name",
            response,
            expected or {"DNSName": "example.com."},
        )

    def test_public_zone_found(self):
        self._respond([zone("Z0123456789ABC")])
        self.stubber.activate()

        assert self.lookup("example.com") == "Z0123456789ABC"
        self.stubber.assert_no_pending_responses()

    def test_lookup_is_logged_at_info(self, caplog):
        self._respond([zone("Z0123456789ABC")])
        self.stubber.activate()

        with caplog.at_level(logging.DEBUG, logger="blueprints.website.zones"):
            self.lookup("example.com")
        levels = [r.levelno for r in caplog.records if r.name == "blueprints.website.zones"]
        assert levels == [logging.INFO]

    def test_private_zone_is_skipped(self):
        self._respond([zone("ZPRIVATE", private=True)])
        self.stubber.activate()

        with pytest.raises(ZoneNotFoundError):
            self.lookup("example.com")

    def test_public_zone_behind_private_zone_of_same_name(self):
        self._respond([zone("ZAPRIVATE", private=True), zone("ZBPUBLIC")])
        self.stubber.activate()

        assert self.lookup("example.com") == "ZBPUBLIC"

    def test_public_zone_on_next_page(self):
        self._respond(
            [zone("ZAPRIVATE", private=True)],
            IsTruncated=True,
            NextDNSName="example.com.",
            NextHostedZoneId="ZBPUBLIC",
        )
        self._respond(
            [zone("ZBPUBLIC")],
            expected={"DNSName": "example.com.", "HostedZoneId": "ZBPUBLIC"},
        )
        self.stubber.activate()

        assert self.lookup("example.com") == "ZBPUBLIC"
        self.stubber.assert_no_pending_responses()

    def test_next_zone_in_listing_is_not_a_match(self):
        self._respond([zone("ZOTHER", name="example.net.")])
        self.stubber.activate()

        with pytest.raises(ZoneNotFoundError) as exc:
            self.lookup("example.com")
        assert exc.value.zone_name == "example.com"
