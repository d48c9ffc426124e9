"""Expand compact website and account-config specs into resource graphs.

The core (graph, policies, outputs) is engine-neutral; ``blueprints.stacks``
materializes graphs with AWS CDK and is imported separately.
"""

from blueprints.account_config import AccountConfiguration, ConfigEntry, resolve
from blueprints.graph import ResourceGraph, ResourceHandle
from blueprints.outputs import project_account_config, project_website
from blueprints.website import WebsiteSpec, build_website

__version__ = "0.1.0"

__all__ = [
    "AccountConfiguration",
    "ConfigEntry",
    "ResourceGraph",
    "ResourceHandle",
    "WebsiteSpec",
    "build_website",
    "project_account_config",
    "project_website",
    "resolve",
]
