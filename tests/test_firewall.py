"""Unit tests for the WAF rule translator."""

from blueprints import kinds
from blueprints.graph import Reference, ResourceGraph
from blueprints.website.firewall import (
    build_firewall,
    managed_rule_group_name,
    translate_action,
    translate_rule,
)
from blueprints.website.spec import WafAction, WafRuleSpec, default_rules


def rule(name="Rule", priority=1, action="block", rule_type="rate_limit", **configuration):
    return WafRuleSpec.model_validate(
        {
            "name": name,
            "priority": priority,
            "action": action,
            "ruleType": rule_type,
            "configuration": configuration,
        }
    )


class TestTranslateRule:
    def setup_method(self):
        self.graph = ResourceGraph()

    def test_actions(self):
        assert translate_action(WafAction.ALLOW) == "allow"
        assert translate_action(WafAction.BLOCK) == "block"
        assert translate_action(WafAction.COUNT) == "count"

    def test_rate_limit_default(self):
        translated = translate_rule(rule(), self.graph)
        assert translated["statement"] == {
            "rate_based_statement": {"limit": 2000, "aggregate_key_type": "IP"}
        }

    def test_rate_limit_explicit(self):
        translated = translate_rule(rule(limit=500), self.graph)
        assert translated["statement"]["rate_based_statement"]["limit"] == 500

    def test_geo_block_default_countries(self):
        translated = translate_rule(rule(rule_type="geo_block"), self.graph)
        assert translated["statement"] == {"geo_match_statement": {"country_codes": ("CN", "RU")}}

    def test_geo_block_explicit_countries(self):
        translated = translate_rule(rule(rule_type="geo_block", countryCodes=["KP"]), self.graph)
        assert translated["statement"]["geo_match_statement"]["country_codes"] == ("KP",)

    def test_managed_rule_default_group(self):
        translated = translate_rule(rule(rule_type="managed_rule"), self.graph)
        assert translated["statement"] == {
            "managed_rule_group_statement": {
                "vendor_name": "AWS",
                "name": "AWSManagedRulesCommonRuleSet",
            }
        }

    def test_managed_rule_group_names(self):
        assert managed_rule_group_name("CommonRuleSet") == "AWSManagedRulesCommonRuleSet"
        assert managed_rule_group_name("AWSManagedRulesLinuxRuleSet") == "AWSManagedRulesLinuxRuleSet"

    def test_ip_set_declares_sub_resource(self):
        translated = translate_rule(
            rule(name="Office", rule_type="ip_set", ipAddresses=["203.0.113.0/24"]), self.graph
        )

        ip_set = self.graph.get("IPSet-Office")
        assert ip_set.kind == kinds.IP_SET
        assert ip_set.properties["addresses"] == ("203.0.113.0/24",)
        assert ip_set.properties["scope"] == "CLOUDFRONT"
        assert translated["statement"] == {
            "ip_set_reference_statement": {"arn": Reference("IPSet-Office", "arn")}
        }

    def test_empty_ip_set_is_legal(self):
        translate_rule(rule(name="Nobody", rule_type="ip_set"), self.graph)
        assert self.graph.get("IPSet-Nobody").properties["addresses"] == ()

    def test_visibility_uses_rule_name(self):
        translated = translate_rule(rule(name="Throttle", action="count"), self.graph)
        assert translated["name"] == "Throttle"
        assert translated["action"] == "count"
        assert translated["visibility_config"] == {
            "sampled_requests_enabled": True,
            "cloud_watch_metrics_enabled": True,
            "metric_name": "Throttle",
        }


class TestBuildFirewall:
    def test_default_rules(self):
        graph = ResourceGraph()
        acl = build_firewall(graph, default_rules())

        props = acl.resource.properties
        assert acl.resource.kind == kinds.WEB_ACL
        assert props["scope"] == "CLOUDFRONT"
        assert props["default_action"] == "allow"
        assert [r["priority"] for r in props["rules"]] == [1, 2, 3, 10]
        assert props["visibility_config"]["metric_name"] == "SecureWebsiteWAF"

    def test_ip_sets_precede_acl(self):
        graph = ResourceGraph()
        acl = build_firewall(
            graph,
            [rule(name="Deny", rule_type="ip_set", ipAddresses=["198.51.100.7/32"])],
        )
        assert [r.logical_id for r in graph] == ["IPSet-Deny", "WebACL"]
        assert acl.resource.depends_on == ("IPSet-Deny",)
