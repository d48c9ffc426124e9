"""
Materialize a ResourceGraph as CDK constructs.

Resources are created in declaration order, so every reference in a
resource's properties already has a construct by the time it is resolved.
"""

import logging
from typing import Any, Callable, Dict

from aws_cdk import (
    Duration,
    RemovalPolicy,
    aws_certificatemanager as acm,
    aws_cloudfront as cf,
    aws_cloudfront_origins as origins,
    aws_iam as iam,
    aws_route53 as route53,
    aws_route53_targets as targets,
    aws_s3 as s3,
    aws_s3_deployment as s3deploy,
    aws_ssm as ssm,
    aws_wafv2 as wafv2,
)
from constructs import Construct

from blueprints import kinds
from blueprints.graph import Join, Reference, Resource, ResourceGraph, thaw

logger = logging.getLogger(__name__)

# graph attribute name -> construct attribute, per resource kind
ATTRIBUTES = {
    kinds.HOSTED_ZONE: {"id": "hosted_zone_id", "name": "zone_name"},
    kinds.CERTIFICATE: {"arn": "certificate_arn"},
    kinds.BUCKET: {"arn": "bucket_arn", "name": "bucket_name", "domain_name": "bucket_domain_name"},
    kinds.ORIGIN_ACCESS_CONTROL: {"id": "origin_access_control_id"},
    kinds.DISTRIBUTION: {"id": "distribution_id", "domain_name": "distribution_domain_name"},
    kinds.IP_SET: {"arn": "attr_arn", "id": "attr_id"},
    kinds.WEB_ACL: {"arn": "attr_arn", "id": "attr_id"},
    kinds.A_RECORD: {"name": "domain_name"},
    kinds.AAAA_RECORD: {"name": "domain_name"},
    kinds.PARAMETER: {"arn": "parameter_arn", "name": "parameter_name"},
}

REMOVAL_POLICIES = {
    "retain": RemovalPolicy.RETAIN,
    "destroy": RemovalPolicy.DESTROY,
}

ALLOWED_METHODS = {
    ("GET", "HEAD"): cf.AllowedMethods.ALLOW_GET_HEAD,
    ("GET", "HEAD", "OPTIONS"): cf.AllowedMethods.ALLOW_GET_HEAD_OPTIONS,
    ("DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"): cf.AllowedMethods.ALLOW_ALL,
}

CACHED_METHODS = {
    ("GET", "HEAD"): cf.CachedMethods.CACHE_GET_HEAD,
    ("GET", "HEAD", "OPTIONS"): cf.CachedMethods.CACHE_GET_HEAD_OPTIONS,
}

CACHE_POLICIES = {
    "CachingOptimized": cf.CachePolicy.CACHING_OPTIMIZED,
    "CachingDisabled": cf.CachePolicy.CACHING_DISABLED,
}

ORIGIN_REQUEST_POLICIES = {
    "CORS-S3Origin": cf.OriginRequestPolicy.CORS_S3_ORIGIN,
}

RESPONSE_HEADERS_POLICIES = {
    "SecurityHeadersPolicy": cf.ResponseHeadersPolicy.SECURITY_HEADERS,
}

PRICE_CLASSES = {
    "PriceClass_100": cf.PriceClass.PRICE_CLASS_100,
    "PriceClass_200": cf.PriceClass.PRICE_CLASS_200,
    "PriceClass_All": cf.PriceClass.PRICE_CLASS_ALL,
}

VIEWER_PROTOCOL_POLICIES = {
    "redirect-to-https": cf.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
    "https-only": cf.ViewerProtocolPolicy.HTTPS_ONLY,
    "allow-all": cf.ViewerProtocolPolicy.ALLOW_ALL,
}


class GraphSynthesizer:
    def __init__(self, scope: Construct):
        self.scope = scope
        self.constructs: Dict[str, Any] = {}
        self._kinds: Dict[str, str] = {}
        self._builders: Dict[str, Callable[[str, dict], Any]] = {
            kinds.HOSTED_ZONE: self._hosted_zone,
            kinds.CERTIFICATE: self._certificate,
            kinds.BUCKET: self._bucket,
            kinds.ORIGIN_ACCESS_CONTROL: self._origin_access_control,
            kinds.IP_SET: self._ip_set,
            kinds.WEB_ACL: self._web_acl,
            kinds.DISTRIBUTION: self._distribution,
            kinds.BUCKET_POLICY: self._bucket_policy,
            kinds.A_RECORD: self._a_record,
            kinds.AAAA_RECORD: self._aaaa_record,
            kinds.BUCKET_DEPLOYMENT: self._bucket_deployment,
            kinds.PARAMETER: self._parameter,
        }

    def synthesize(self, graph: ResourceGraph) -> Dict[str, Any]:
        for resource in graph:
            self.add(resource)
        return self.constructs

    def add(self, resource: Resource) -> Any:
        try:
            builder = self._builders[resource.kind]
        except KeyError:
            raise NotImplementedError(f"No CDK builder for resource kind {resource.kind}") from None
        props = self.resolve(thaw(resource.properties))
        construct = builder(resource.logical_id, props)
        self.constructs[resource.logical_id] = construct
        self._kinds[resource.logical_id] = resource.kind
        logger.debug("Materialized %s as %s", resource.logical_id, type(construct).__name__)
        return construct

    def resolve(self, value: Any) -> Any:
        """Turn references inside ``value`` into constructs or their attributes."""
        if isinstance(value, Reference):
            construct = self.constructs[value.logical_id]
            if value.attribute is None:
                return construct
            attribute = ATTRIBUTES[self._kinds[value.logical_id]][value.attribute]
            return getattr(construct, attribute)
        if isinstance(value, Join):
            return "".join(str(self.resolve(part)) for part in value.parts)
        if isinstance(value, dict):
            return {key: self.resolve(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.resolve(item) for item in value]
        return value

    # Route 53 / ACM

    def _hosted_zone(self, logical_id: str, props: dict):
        return route53.HostedZone.from_hosted_zone_attributes(
            self.scope, logical_id,
            hosted_zone_id=props["hosted_zone_id"],
            zone_name=props["zone_name"],
        )

    def _certificate(self, logical_id: str, props: dict):
        return acm.Certificate(
            self.scope, logical_id,
            domain_name=props["domain_name"],
            subject_alternative_names=props["subject_alternative_names"] or None,
            validation=acm.CertificateValidation.from_dns(props["validation"]["hosted_zone"]),
        )

    def _record_target(self, props: dict):
        return route53.RecordTarget.from_alias(targets.CloudFrontTarget(props["target"]["alias"]))

    def _a_record(self, logical_id: str, props: dict):
        return route53.ARecord(
            self.scope, logical_id,
            zone=props["zone"],
            record_name=props["record_name"],
            target=self._record_target(props),
        )

    def _aaaa_record(self, logical_id: str, props: dict):
        return route53.AaaaRecord(
            self.scope, logical_id,
            zone=props["zone"],
            record_name=props["record_name"],
            target=self._record_target(props),
        )

    # S3

    def _bucket(self, logical_id: str, props: dict):
        lifecycle_rules = [
            s3.LifecycleRule(
                id=rule["id"],
                enabled=rule["enabled"],
                expiration=Duration.days(rule["expiration_days"]),
            )
            for rule in props.get("lifecycle_rules", [])
        ]
        object_ownership = props.get("object_ownership")
        return s3.Bucket(
            self.scope, logical_id,
            bucket_name=props["bucket_name"],
            public_read_access=props["public_read_access"],
            block_public_access=getattr(s3.BlockPublicAccess, props["block_public_access"]),
            encryption=getattr(s3.BucketEncryption, props["encryption"]),
            versioned=props["versioned"],
            removal_policy=REMOVAL_POLICIES[props["removal_policy"]],
            auto_delete_objects=props["auto_delete_objects"],
            object_ownership=getattr(s3.ObjectOwnership, object_ownership) if object_ownership else None,
            lifecycle_rules=lifecycle_rules or None,
        )

    def _bucket_policy(self, logical_id: str, props: dict):
        statement = props["statement"]
        bucket = props["bucket"]
        bucket.add_to_resource_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW if statement["effect"] == "Allow" else iam.Effect.DENY,
                principals=[iam.ServicePrincipal(statement["principals"]["service"])],
                actions=statement["actions"],
                resources=statement["resources"],
                conditions=statement["conditions"],
            )
        )
        return bucket.policy

    def _bucket_deployment(self, logical_id: str, props: dict):
        return s3deploy.BucketDeployment(
            self.scope, logical_id,
            sources=[s3deploy.Source.asset(path) for path in props["sources"]],
            destination_bucket=props["destination_bucket"],
            distribution=props["distribution"],
            distribution_paths=props["distribution_paths"],
            prune=props["prune"],
            retain_on_delete=props["retain_on_delete"],
        )

    # CloudFront

    def _origin_access_control(self, logical_id: str, props: dict):
        return cf.S3OriginAccessControl(self.scope, logical_id, description=props["description"])

    def _behavior(self, props: dict) -> cf.BehaviorOptions:
        origin = origins.S3BucketOrigin.with_origin_access_control(
            props["origin"]["bucket"],
            origin_access_control=props["origin"]["origin_access_control"],
        )
        cached = props.get("cached_methods")
        return cf.BehaviorOptions(
            origin=origin,
            viewer_protocol_policy=VIEWER_PROTOCOL_POLICIES[props["viewer_protocol_policy"]],
            allowed_methods=ALLOWED_METHODS[tuple(props["allowed_methods"])],
            cached_methods=CACHED_METHODS[tuple(cached)] if cached else None,
            compress=props.get("compress"),
            cache_policy=CACHE_POLICIES[props["cache_policy"]],
            origin_request_policy=ORIGIN_REQUEST_POLICIES.get(props.get("origin_request_policy")),
            response_headers_policy=RESPONSE_HEADERS_POLICIES.get(props.get("response_headers_policy")),
        )

    def _distribution(self, logical_id: str, props: dict):
        error_responses = [
            cf.ErrorResponse(
                http_status=response["http_status"],
                response_http_status=response["response_http_status"],
                response_page_path=response["response_page_path"],
                ttl=Duration.seconds(response["ttl_seconds"]),
            )
            for response in props["error_responses"]
        ]
        return cf.Distribution(
            self.scope, logical_id,
            default_behavior=self._behavior(props["default_behavior"]),
            additional_behaviors={
                path: self._behavior(behavior)
                for path, behavior in props["additional_behaviors"].items()
            },
            domain_names=props["domain_names"],
            certificate=props["certificate"],
            default_root_object=props["default_root_object"],
            error_responses=error_responses,
            price_class=PRICE_CLASSES[props["price_class"]],
            comment=props["comment"],
            web_acl_id=props.get("web_acl_id"),
            enable_logging=props["enable_logging"],
            log_bucket=props.get("log_bucket"),
            log_file_prefix=props.get("log_file_prefix"),
            log_includes_cookies=props.get("log_includes_cookies"),
        )

    # WAF

    def _ip_set(self, logical_id: str, props: dict):
        return wafv2.CfnIPSet(
            self.scope, logical_id,
            scope=props["scope"],
            ip_address_version=props["ip_address_version"],
            addresses=props["addresses"],
        )

    @staticmethod
    def _visibility(config: dict):
        return wafv2.CfnWebACL.VisibilityConfigProperty(
            sampled_requests_enabled=config["sampled_requests_enabled"],
            cloud_watch_metrics_enabled=config["cloud_watch_metrics_enabled"],
            metric_name=config["metric_name"],
        )

    @staticmethod
    def _statement(statement: dict):
        if "rate_based_statement" in statement:
            rate = statement["rate_based_statement"]
            return wafv2.CfnWebACL.StatementProperty(
                rate_based_statement=wafv2.CfnWebACL.RateBasedStatementProperty(
                    limit=rate["limit"], aggregate_key_type=rate["aggregate_key_type"]
                )
            )
        if "geo_match_statement" in statement:
            return wafv2.CfnWebACL.StatementProperty(
                geo_match_statement=wafv2.CfnWebACL.GeoMatchStatementProperty(
                    country_codes=statement["geo_match_statement"]["country_codes"]
                )
            )
        if "ip_set_reference_statement" in statement:
            return wafv2.CfnWebACL.StatementProperty(
                ip_set_reference_statement=wafv2.CfnWebACL.IPSetReferenceStatementProperty(
                    arn=statement["ip_set_reference_statement"]["arn"]
                )
            )
        group = statement["managed_rule_group_statement"]
        return wafv2.CfnWebACL.StatementProperty(
            managed_rule_group_statement=wafv2.CfnWebACL.ManagedRuleGroupStatementProperty(
                vendor_name=group["vendor_name"], name=group["name"]
            )
        )

    def _rule(self, rule: dict):
        statement = rule["statement"]
        action = rule["action"]
        options = {}
        if "managed_rule_group_statement" in statement:
            # rule groups take an override action: "none" keeps the group's own block actions
            override = {"count": {}} if action == "count" else {"none": {}}
            options["override_action"] = wafv2.CfnWebACL.OverrideActionProperty(**override)
        else:
            options["action"] = wafv2.CfnWebACL.RuleActionProperty(**{action: {}})
        return wafv2.CfnWebACL.RuleProperty(
            name=rule["name"],
            priority=rule["priority"],
            statement=self._statement(statement),
            visibility_config=self._visibility(rule["visibility_config"]),
            **options,
        )

    def _web_acl(self, logical_id: str, props: dict):
        return wafv2.CfnWebACL(
            self.scope, logical_id,
            scope=props["scope"],
            default_action=wafv2.CfnWebACL.DefaultActionProperty(**{props["default_action"]: {}}),
            rules=[self._rule(rule) for rule in props["rules"]],
            visibility_config=self._visibility(props["visibility_config"]),
        )

    # SSM

    def _parameter(self, logical_id: str, props: dict):
        return ssm.StringParameter(
            self.scope, logical_id,
            parameter_name=props["parameter_name"],
            string_value=props["string_value"],
            description=props["description"],
            tier=ssm.ParameterTier.STANDARD if props["tier"] == "Standard" else ssm.ParameterTier.ADVANCED,
        )
