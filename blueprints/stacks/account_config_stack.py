from typing import Optional

from aws_cdk import CfnOutput, Stack
from constructs import Construct

from blueprints.account_config import AccountConfiguration, ConfigSource, resolve
from blueprints.outputs import project_account_config
from blueprints.stacks.synth import GraphSynthesizer


class AccountConfigStack(Stack):
    """Publishes one account's record from cdk.context.json to Parameter Store."""

    def __init__(self, scope: Construct, construct_id: str,
                 account_id: Optional[str] = None,
                 context_file_path: Optional[ConfigSource] = None,
                 parameter_prefix: Optional[str] = None,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.account_id = account_id or self.account
        self.config: AccountConfiguration = resolve(context_file_path, self.account_id, parameter_prefix)

        synth = GraphSynthesizer(self)
        resources = synth.synthesize(self.config.graph)
        self.parameters = {
            entry.key: resources[entry.entry_id] for entry in self.config.entries
        }

        for output in project_account_config(self.config):
            CfnOutput(self, output.name,
                      value=synth.resolve(output.value),
                      description=output.description)

    def get_parameter(self, key: str):
        entry = self.config.get_entry(key)
        return self.parameters[entry.key]

    def get_config_value(self, key: str, default=None):
        return self.config.get_config_value(key, default)
