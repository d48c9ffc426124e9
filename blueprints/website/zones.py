import logging
from typing import Callable, Optional

import boto3

from blueprints.errors import ZoneNotFoundError

logger = logging.getLogger(__name__)

# apex domain -> hosted zone id
ZoneLookup = Callable[[str], str]


class Route53ZoneLookup:
    """Finds the public hosted zone for an apex domain through the Route 53 API.

    Zones sharing the name (split-horizon private zones) are skipped. Client
    errors are not caught: a failed lookup is fatal for the build.
    """

    def __init__(self, client=None, session: Optional[boto3.session.Session] = None):
        if client is None:
            client = (session or boto3.session.Session()).client("route53")
        self.client = client

    def __call__(self, zone_name: str) -> str:
        logger.info("Looking up hosted zone for %s through Route 53", zone_name)
        fqdn = zone_name.rstrip(".") + "."
        params = {"DNSName": fqdn}
        while True:
            resp = self.client.list_hosted_zones_by_name(**params)
            for zone in resp.get("HostedZones", []):
                # listing is sorted by name, so the first other name ends the search
                if zone["Name"] != fqdn:
                    raise ZoneNotFoundError(zone_name)
                if not zone.get("Config", {}).get("PrivateZone", False):
                    return zone["Id"].split("/")[-1]
            if not resp.get("IsTruncated"):
                break
            params = {"DNSName": resp["NextDNSName"], "HostedZoneId": resp["NextHostedZoneId"]}
        raise ZoneNotFoundError(zone_name)
