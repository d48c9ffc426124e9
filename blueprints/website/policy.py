"""
Expand a WebsiteSpec into the resource graph of a secure static website:
certificate, private content bucket behind CloudFront with origin access
control, optional WAF and access logs, alias records and optional content
deployment.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from blueprints import kinds
from blueprints.errors import FirewallNotDeclaredError, ZoneNotFoundError
from blueprints.graph import ResourceGraph, ResourceHandle, join
from blueprints.website.firewall import build_firewall
from blueprints.website.spec import DEFAULT_ACCOUNT, ResolvedWebsiteSpec, WebsiteSpec, derive
from blueprints.website.zones import ZoneLookup

logger = logging.getLogger(__name__)

READ_METHODS = ("GET", "HEAD", "OPTIONS")
ALL_METHODS = ("DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT")
API_PATH_PATTERN = "/api/*"


@dataclass(frozen=True)
class WebsiteTopology:
    spec: ResolvedWebsiteSpec
    graph: ResourceGraph
    hosted_zone: ResourceHandle
    certificate: ResourceHandle
    bucket: ResourceHandle
    origin_access_control: ResourceHandle
    distribution: ResourceHandle
    bucket_policy: ResourceHandle
    a_record: ResourceHandle
    aaaa_record: ResourceHandle
    logs_bucket: Optional[ResourceHandle] = None
    web_acl: Optional[ResourceHandle] = None
    deployment: Optional[ResourceHandle] = None

    def require_firewall(self) -> ResourceHandle:
        if self.web_acl is None:
            raise FirewallNotDeclaredError()
        return self.web_acl


def _resolve_zone_id(spec: ResolvedWebsiteSpec, zone_lookup: Optional[ZoneLookup]) -> str:
    if spec.hosted_zone_id:
        return spec.hosted_zone_id
    if zone_lookup is None:
        raise ZoneNotFoundError(spec.apex_domain, "no hostedZoneId given and no zone lookup configured")
    return zone_lookup(spec.apex_domain)


def _bucket_properties(
    name: Optional[str], spec: ResolvedWebsiteSpec, versioned: bool
) -> dict:
    return {
        "bucket_name": name,
        "public_read_access": False,
        "block_public_access": "BLOCK_ALL",
        "encryption": "S3_MANAGED",
        "versioned": versioned,
        "removal_policy": spec.removal_policy.value,
        "auto_delete_objects": spec.auto_delete_objects,
    }


def _behavior(bucket: ResourceHandle, oac: ResourceHandle, **options: Any) -> dict:
    behavior = {
        "origin": {"bucket": bucket.ref(), "origin_access_control": oac.ref()},
        "viewer_protocol_policy": "redirect-to-https",
    }
    behavior.update(options)
    return behavior


def build_website(
    spec: Union[WebsiteSpec, Mapping[str, Any]],
    zone_lookup: Optional[ZoneLookup] = None,
    graph: Optional[ResourceGraph] = None,
) -> WebsiteTopology:
    resolved = derive(spec)
    graph = graph if graph is not None else ResourceGraph()

    # 1) DNS zone
    zone_id = _resolve_zone_id(resolved, zone_lookup)
    hosted_zone = graph.declare(
        kinds.HOSTED_ZONE,
        "HostedZone",
        {"hosted_zone_id": zone_id, "zone_name": resolved.apex_domain},
    )

    # 2) Certificate, DNS validated through the zone
    certificate = graph.declare(
        kinds.CERTIFICATE,
        "Certificate",
        {
            "domain_name": resolved.domain_name,
            "subject_alternative_names": resolved.subject_alternative_names,
            "validation": {"method": "DNS", "hosted_zone": hosted_zone.ref()},
        },
    )

    # 3) Content bucket
    bucket = graph.declare(
        kinds.BUCKET,
        "WebsiteBucket",
        _bucket_properties(resolved.bucket_name, resolved, versioned=True),
    )

    # 4) Access logs bucket
    logs_bucket = None
    if resolved.enable_logging:
        props = _bucket_properties(resolved.logs_bucket_name, resolved, versioned=False)
        props["object_ownership"] = "OBJECT_WRITER"
        props["lifecycle_rules"] = [
            {
                "id": "DeleteOldLogs",
                "enabled": True,
                "expiration_days": resolved.log_expiration_days,
            }
        ]
        logs_bucket = graph.declare(kinds.BUCKET, "LogsBucket", props)

    # 5) Origin access control and firewall
    oac = graph.declare(
        kinds.ORIGIN_ACCESS_CONTROL,
        "OAC",
        {"description": f"OAC for {resolved.domain_name}"},
    )

    web_acl = None
    if resolved.enable_waf:
        web_acl = build_firewall(graph, resolved.waf_rules)

    # 6) Distribution
    error_page = f"/{resolved.index_document}"
    distribution_props = {
        "default_behavior": _behavior(
            bucket,
            oac,
            allowed_methods=READ_METHODS,
            cached_methods=READ_METHODS,
            compress=True,
            cache_policy="CachingOptimized",
            origin_request_policy="CORS-S3Origin",
            response_headers_policy="SecurityHeadersPolicy",
        ),
        "additional_behaviors": {
            API_PATH_PATTERN: _behavior(
                bucket,
                oac,
                allowed_methods=ALL_METHODS,
                cache_policy="CachingDisabled",
            ),
        },
        "domain_names": resolved.domain_names,
        "certificate": certificate.ref(),
        "default_root_object": resolved.index_document,
        "error_responses": [
            {
                "http_status": status,
                "response_http_status": 200,
                "response_page_path": error_page,
                "ttl_seconds": resolved.error_response_ttl_seconds,
            }
            for status in (403, 404)
        ],
        "price_class": resolved.price_class.value,
        "comment": resolved.distribution_comment,
        "enable_logging": resolved.enable_logging,
    }
    if web_acl is not None:
        distribution_props["web_acl_id"] = web_acl.ref("arn")
    if logs_bucket is not None:
        distribution_props["log_bucket"] = logs_bucket.ref()
        distribution_props["log_file_prefix"] = resolved.log_file_prefix
        distribution_props["log_includes_cookies"] = True

    distribution = graph.declare(kinds.DISTRIBUTION, "Distribution", distribution_props)

    # 7) Read grant for this distribution only; a wildcard account needs a pattern match
    condition = "StringLike" if resolved.account == DEFAULT_ACCOUNT else "StringEquals"
    source_arn = join(
        f"arn:aws:cloudfront::{resolved.account}:distribution/", distribution.ref("id")
    )
    bucket_policy = graph.declare(
        kinds.BUCKET_POLICY,
        "WebsiteBucketPolicy",
        {
            "bucket": bucket.ref(),
            "statement": {
                "effect": "Allow",
                "principals": {"service": "cloudfront.amazonaws.com"},
                "actions": ["s3:GetObject"],
                "resources": [join(bucket.ref("arn"), "/*")],
                "conditions": {condition: {"AWS:SourceArn": source_arn}},
            },
        },
    )

    # 8) Alias records
    record_props = {
        "zone": hosted_zone.ref(),
        "record_name": resolved.domain_name,
        "target": {"alias": distribution.ref()},
    }
    a_record = graph.declare(kinds.A_RECORD, "ARecord", record_props)
    aaaa_record = graph.declare(kinds.AAAA_RECORD, "AaaaRecord", record_props)

    # 9) Content deployment
    deployment = None
    if resolved.code_source_path:
        deployment = graph.declare(
            kinds.BUCKET_DEPLOYMENT,
            "WebsiteDeployment",
            {
                "sources": [resolved.code_source_path],
                "destination_bucket": bucket.ref(),
                "distribution": distribution.ref(),
                "distribution_paths": ["/*"],
                "prune": True,
                "retain_on_delete": False,
            },
        )

    logger.info(
        "Resolved website %s into %d resources (waf=%s, logging=%s)",
        resolved.domain_name,
        len(graph),
        resolved.enable_waf,
        resolved.enable_logging,
    )
    return WebsiteTopology(
        spec=resolved,
        graph=graph,
        hosted_zone=hosted_zone,
        certificate=certificate,
        bucket=bucket,
        origin_access_control=oac,
        distribution=distribution,
        bucket_policy=bucket_policy,
        a_record=a_record,
        aaaa_record=aaaa_record,
        logs_bucket=logs_bucket,
        web_acl=web_acl,
        deployment=deployment,
    )
