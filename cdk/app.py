#!/usr/bin/env python3
import logging
import os

import aws_cdk as cdk

from blueprints.account_config import DEFAULT_CONTEXT_FILE
from blueprints.stacks import AccountConfigStack, SiteStack

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"),
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = cdk.App()

env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION", "us-east-1")  # For ACM cert on CloudFront, cert must be in us-east-1
)

# Whole spec under "website", or the common fields as flat context keys
website = app.node.try_get_context("website") or {
    "domainName": app.node.try_get_context("domain_name") or "example.com",
    "hostedZoneId": app.node.try_get_context("hosted_zone_id"),
    "codeSourcePath": app.node.try_get_context("code_source_path"),
}

SiteStack(app, "SiteStack",
          env=env,
          website=website,
          description="Secure static website (S3 + CloudFront + WAF)")

# Per-account parameters, only when an accounts file is present
context_file = app.node.try_get_context("account_config_file") or DEFAULT_CONTEXT_FILE
if os.path.exists(context_file):
    AccountConfigStack(app, "AccountConfigStack",
                       env=env,
                       account_id=app.node.try_get_context("account_id") or os.getenv("CDK_DEFAULT_ACCOUNT"),
                       context_file_path=context_file,
                       parameter_prefix=app.node.try_get_context("parameter_prefix"))

app.synth()
