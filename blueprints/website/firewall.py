"""
Translate ``WafRuleSpec`` objects into web ACL rules.

Each rule becomes one entry of the ``WebACL`` resource. ``ip_set`` rules
additionally declare an ``IPSet-{name}`` resource and reference its ARN.
"""

from typing import Any, Dict, Iterable

from blueprints import kinds
from blueprints.graph import ResourceGraph, ResourceHandle
from blueprints.website.spec import (
    DEFAULT_COUNTRY_CODES,
    DEFAULT_MANAGED_RULE_GROUP,
    DEFAULT_RATE_LIMIT,
    WafAction,
    WafRuleSpec,
    WafRuleType,
)

MANAGED_RULE_VENDOR = "AWS"
MANAGED_RULE_PREFIX = "AWSManagedRules"
WEB_ACL_SCOPE = "CLOUDFRONT"
WEB_ACL_METRIC_NAME = "SecureWebsiteWAF"

_ACTIONS = {
    WafAction.ALLOW: "allow",
    WafAction.BLOCK: "block",
    WafAction.COUNT: "count",
}


def visibility_config(metric_name: str) -> Dict[str, Any]:
    return {
        "sampled_requests_enabled": True,
        "cloud_watch_metrics_enabled": True,
        "metric_name": metric_name,
    }


def managed_rule_group_name(name: str) -> str:
    if name.startswith(MANAGED_RULE_PREFIX):
        return name
    return MANAGED_RULE_PREFIX + name


def translate_action(action: WafAction) -> str:
    return _ACTIONS[WafAction(action)]


def translate_statement(rule: WafRuleSpec, graph: ResourceGraph) -> Dict[str, Any]:
    config = rule.configuration

    if rule.rule_type is WafRuleType.RATE_LIMIT:
        limit = config.limit if config.limit is not None else DEFAULT_RATE_LIMIT
        return {"rate_based_statement": {"limit": limit, "aggregate_key_type": "IP"}}

    if rule.rule_type is WafRuleType.GEO_BLOCK:
        codes = tuple(config.country_codes or DEFAULT_COUNTRY_CODES)
        return {"geo_match_statement": {"country_codes": codes}}

    if rule.rule_type is WafRuleType.IP_SET:
        ip_set = graph.declare(
            kinds.IP_SET,
            f"IPSet-{rule.name}",
            {
                "scope": WEB_ACL_SCOPE,
                "ip_address_version": "IPV4",
                "addresses": tuple(config.ip_addresses or ()),
            },
        )
        return {"ip_set_reference_statement": {"arn": ip_set.ref("arn")}}

    group = config.name or DEFAULT_MANAGED_RULE_GROUP
    return {
        "managed_rule_group_statement": {
            "vendor_name": MANAGED_RULE_VENDOR,
            "name": managed_rule_group_name(group),
        }
    }


def translate_rule(rule: WafRuleSpec, graph: ResourceGraph) -> Dict[str, Any]:
    return {
        "name": rule.name,
        "priority": rule.priority,
        "action": translate_action(rule.action),
        "statement": translate_statement(rule, graph),
        "visibility_config": visibility_config(rule.name),
    }


def build_firewall(
    graph: ResourceGraph, rules: Iterable[WafRuleSpec], logical_id: str = "WebACL"
) -> ResourceHandle:
    translated = [translate_rule(rule, graph) for rule in rules]
    return graph.declare(
        kinds.WEB_ACL,
        logical_id,
        {
            "scope": WEB_ACL_SCOPE,
            "default_action": "allow",
            "rules": translated,
            "visibility_config": visibility_config(WEB_ACL_METRIC_NAME),
        },
    )
