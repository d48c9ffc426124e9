from blueprints.stacks.account_config_stack import AccountConfigStack
from blueprints.stacks.site_stack import SiteStack
from blueprints.stacks.synth import GraphSynthesizer

__all__ = ["AccountConfigStack", "GraphSynthesizer", "SiteStack"]
