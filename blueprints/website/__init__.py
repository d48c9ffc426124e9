from blueprints.website.policy import WebsiteTopology, build_website
from blueprints.website.spec import (
    ResolvedWebsiteSpec,
    WafRuleConfiguration,
    WafRuleSpec,
    WebsiteSpec,
    derive,
)
from blueprints.website.zones import Route53ZoneLookup

__all__ = [
    "ResolvedWebsiteSpec",
    "Route53ZoneLookup",
    "WafRuleConfiguration",
    "WafRuleSpec",
    "WebsiteSpec",
    "WebsiteTopology",
    "build_website",
    "derive",
]
