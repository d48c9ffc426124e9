from typing import Any, Mapping, Optional, Union

from aws_cdk import (
    CfnOutput,
    Stack,
    aws_route53 as route53,
)
from constructs import Construct

from blueprints.outputs import project_website
from blueprints.stacks.synth import GraphSynthesizer
from blueprints.website.policy import WebsiteTopology, build_website
from blueprints.website.spec import WebsiteSpec, parse_spec
from blueprints.website.zones import ZoneLookup


class SiteStack(Stack):
    """Secure static website: S3 (OAC only) + CloudFront + ACM + Route 53, optional WAF."""

    def __init__(self, scope: Construct, construct_id: str,
                 website: Union[WebsiteSpec, Mapping[str, Any]],
                 zone_lookup: Optional[ZoneLookup] = None,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Without an explicit lookup the zone comes from the CDK context provider
        if zone_lookup is None:
            zone_lookup = self._context_zone_lookup

        # Scope the bucket grant to this stack's account unless the spec names one
        spec = parse_spec(website)
        if spec.account is None:
            spec = spec.model_copy(update={"account": self.account})

        self.topology: WebsiteTopology = build_website(spec, zone_lookup=zone_lookup)

        synth = GraphSynthesizer(self)
        resources = synth.synthesize(self.topology.graph)

        self.bucket = resources["WebsiteBucket"]
        self.distribution = resources["Distribution"]
        self.certificate = resources["Certificate"]
        self.web_acl = resources.get("WebACL")
        self.logs_bucket = resources.get("LogsBucket")

        for output in project_website(self.topology):
            CfnOutput(self, output.name,
                      value=synth.resolve(output.value),
                      description=output.description)

        self.distribution_domain = self.distribution.distribution_domain_name

    def _context_zone_lookup(self, zone_name: str) -> str:
        zone = route53.HostedZone.from_lookup(self, "HostedZoneLookup", domain_name=zone_name)
        return zone.hosted_zone_id
