"""
Input models for the website blueprint and the pure ``derive`` step that
resolves every default before anything is declared.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from blueprints.errors import InvalidSpecError

DEFAULT_INDEX_DOCUMENT = "index.html"
DEFAULT_ACCOUNT = "*"
ERROR_RESPONSE_TTL_SECONDS = 300
LOG_FILE_PREFIX = "cloudfront-logs/"
LOG_EXPIRATION_DAYS = 90

DEFAULT_RATE_LIMIT = 2000
MIN_RATE_LIMIT = 10
MAX_RATE_LIMIT = 2_000_000_000
DEFAULT_COUNTRY_CODES = ("CN", "RU")
DEFAULT_MANAGED_RULE_GROUP = "CommonRuleSet"


class WafAction(str, Enum):
    ALLOW = "allow"
    BLOCK = "block"
    COUNT = "count"


class WafRuleType(str, Enum):
    RATE_LIMIT = "rate_limit"
    GEO_BLOCK = "geo_block"
    IP_SET = "ip_set"
    MANAGED_RULE = "managed_rule"


class RemovalPolicy(str, Enum):
    RETAIN = "retain"
    DESTROY = "destroy"


class PriceClass(str, Enum):
    PRICE_CLASS_100 = "PriceClass_100"
    PRICE_CLASS_200 = "PriceClass_200"
    PRICE_CLASS_ALL = "PriceClass_All"


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


class WafRuleConfiguration(_Model):
    limit: Optional[int] = Field(default=None, ge=MIN_RATE_LIMIT, le=MAX_RATE_LIMIT)
    country_codes: Optional[List[str]] = None
    name: Optional[str] = None
    ip_addresses: Optional[List[str]] = None


class WafRuleSpec(_Model):
    name: str = Field(min_length=1)
    priority: int
    action: WafAction
    rule_type: WafRuleType
    configuration: WafRuleConfiguration = Field(default_factory=WafRuleConfiguration)

    # "BLOCK" / "RATE_LIMIT" spellings are accepted; anything else is rejected.
    @field_validator("action", "rule_type", mode="before")
    @classmethod
    def normalize_case(cls, value: Any) -> Any:
        return _lower(value)


class WebsiteSpec(_Model):
    domain_name: str
    account: Optional[str] = None
    hosted_zone_id: Optional[str] = None
    bucket_name: Optional[str] = None
    distribution_comment: Optional[str] = None
    index_document: Optional[str] = None
    error_document: Optional[str] = None
    enable_waf: Optional[bool] = None
    enable_logging: Optional[bool] = None
    waf_rules: Optional[List[WafRuleSpec]] = None
    code_source_path: Optional[str] = None
    price_class: Optional[PriceClass] = None
    removal_policy: Optional[RemovalPolicy] = None
    subject_alternative_names: Optional[List[str]] = None
    logs_bucket_name: Optional[str] = None

    @field_validator("removal_policy", mode="before")
    @classmethod
    def normalize_case(cls, value: Any) -> Any:
        return _lower(value)

    @field_validator("domain_name")
    @classmethod
    def require_domain(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("domainName must not be empty")
        return value

    @model_validator(mode="after")
    def require_unique_rules(self) -> "WebsiteSpec":
        if not self.waf_rules:
            return self
        seen_names, seen_priorities = set(), set()
        for rule in self.waf_rules:
            if rule.name in seen_names:
                raise ValueError(f"duplicate WAF rule name '{rule.name}'")
            if rule.priority in seen_priorities:
                raise ValueError(f"duplicate WAF rule priority {rule.priority} ('{rule.name}')")
            seen_names.add(rule.name)
            seen_priorities.add(rule.priority)
        return self


def parse_spec(spec: Union[WebsiteSpec, Mapping[str, Any]]) -> WebsiteSpec:
    if isinstance(spec, WebsiteSpec):
        return spec
    try:
        return WebsiteSpec.model_validate(spec)
    except ValidationError as err:
        raise InvalidSpecError(f"Invalid website spec: {err}") from err


def apex_domain(domain_name: str) -> str:
    """The last two labels of ``domain_name``: www.a.example.com -> example.com."""
    parts = domain_name.split(".")
    if len(parts) >= 2:
        return ".".join(parts[-2:])
    return domain_name


@dataclass(frozen=True)
class ResolvedWebsiteSpec:
    domain_name: str
    apex_domain: str
    hosted_zone_id: Optional[str]
    account: str
    bucket_name: Optional[str]
    logs_bucket_name: Optional[str]
    distribution_comment: str
    index_document: str
    error_document: str
    enable_waf: bool
    enable_logging: bool
    waf_rules: Tuple[WafRuleSpec, ...]
    code_source_path: Optional[str]
    price_class: PriceClass
    removal_policy: RemovalPolicy
    auto_delete_objects: bool
    subject_alternative_names: Tuple[str, ...]
    error_response_ttl_seconds: int = ERROR_RESPONSE_TTL_SECONDS
    log_file_prefix: str = LOG_FILE_PREFIX
    log_expiration_days: int = LOG_EXPIRATION_DAYS

    @property
    def domain_names(self) -> Tuple[str, ...]:
        return (self.domain_name,) + self.subject_alternative_names


def default_rules() -> Tuple[WafRuleSpec, ...]:
    """Common, known-bad-inputs and Linux managed groups plus a rate limit."""
    return (
        WafRuleSpec(
            name="AWSManagedRulesCommonRuleSet",
            priority=1,
            action=WafAction.BLOCK,
            rule_type=WafRuleType.MANAGED_RULE,
            configuration=WafRuleConfiguration(name="AWSManagedRulesCommonRuleSet"),
        ),
        WafRuleSpec(
            name="AWSManagedRulesKnownBadInputsRuleSet",
            priority=2,
            action=WafAction.BLOCK,
            rule_type=WafRuleType.MANAGED_RULE,
            configuration=WafRuleConfiguration(name="AWSManagedRulesKnownBadInputsRuleSet"),
        ),
        WafRuleSpec(
            name="AWSManagedRulesLinuxRuleSet",
            priority=3,
            action=WafAction.BLOCK,
            rule_type=WafRuleType.MANAGED_RULE,
            configuration=WafRuleConfiguration(name="AWSManagedRulesLinuxRuleSet"),
        ),
        WafRuleSpec(
            name="RateLimitRule",
            priority=10,
            action=WafAction.BLOCK,
            rule_type=WafRuleType.RATE_LIMIT,
            configuration=WafRuleConfiguration(limit=DEFAULT_RATE_LIMIT),
        ),
    )


def derive(spec: Union[WebsiteSpec, Mapping[str, Any]]) -> ResolvedWebsiteSpec:
    spec = parse_spec(spec)
    removal_policy = spec.removal_policy or RemovalPolicy.DESTROY
    enable_waf = spec.enable_waf is not False
    rules: Tuple[WafRuleSpec, ...] = ()
    if enable_waf:
        rules = tuple(spec.waf_rules) if spec.waf_rules is not None else default_rules()

    return ResolvedWebsiteSpec(
        domain_name=spec.domain_name,
        apex_domain=apex_domain(spec.domain_name),
        hosted_zone_id=spec.hosted_zone_id,
        account=spec.account or DEFAULT_ACCOUNT,
        bucket_name=spec.bucket_name,
        logs_bucket_name=spec.logs_bucket_name,
        distribution_comment=spec.distribution_comment or f"Secure website for {spec.domain_name}",
        index_document=spec.index_document or DEFAULT_INDEX_DOCUMENT,
        error_document=spec.error_document or DEFAULT_INDEX_DOCUMENT,
        enable_waf=enable_waf,
        enable_logging=bool(spec.enable_logging),
        waf_rules=rules,
        code_source_path=spec.code_source_path,
        price_class=spec.price_class or PriceClass.PRICE_CLASS_100,
        removal_policy=removal_policy,
        auto_delete_objects=removal_policy is RemovalPolicy.DESTROY,
        subject_alternative_names=tuple(spec.subject_alternative_names or ()),
    )
