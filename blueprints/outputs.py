from dataclasses import dataclass
from typing import Any, Dict, Tuple

from blueprints.account_config import AccountConfiguration, capitalize_first
from blueprints.website.policy import WebsiteTopology


@dataclass(frozen=True)
class Output:
    name: str
    value: Any
    description: str = ""


def project_website(topology: WebsiteTopology) -> Tuple[Output, ...]:
    outputs = [
        Output("WebsiteUrl", f"https://{topology.spec.domain_name}", "Website URL"),
        Output("BucketName", topology.bucket.ref("name"), "S3 bucket name for website content"),
        Output("DistributionId", topology.distribution.ref("id"), "CloudFront distribution ID"),
        Output("CertificateArn", topology.certificate.ref("arn"), "ACM certificate ARN"),
    ]
    if topology.web_acl is not None:
        outputs.append(Output("WebAclArn", topology.web_acl.ref("arn"), "WAF WebACL ARN"))
    if topology.logs_bucket is not None:
        outputs.append(
            Output("LogsBucketName", topology.logs_bucket.ref("name"), "CloudFront logs bucket name")
        )
    return tuple(outputs)


def project_account_config(config: AccountConfiguration) -> Tuple[Output, ...]:
    outputs = [
        Output("AccountId", config.account_id, "AWS Account ID"),
        Output("ParameterPrefix", config.prefix, "Parameter Store prefix for account configuration"),
        Output("ConfigKeys", ",".join(config.all_keys()), "Available configuration keys"),
    ]
    for entry in config.entries:
        outputs.append(
            Output(
                f"{capitalize_first(entry.key)}ParameterArn",
                entry.reference,
                f"Parameter Store ARN for {entry.key}",
            )
        )
    return tuple(outputs)


def as_dict(outputs: Tuple[Output, ...]) -> Dict[str, str]:
    return {output.name: str(output.value) for output in outputs}
