"""
Per-account configuration published as parameters.

``cdk.context.json`` (or any JSON document of the same shape) maps account
ids to records:

    {"123456789012": {"stage": "dev", "zone": "dev.example.com"}}

``resolve`` selects one account and declares one parameter per key at
``{prefix}/{key}``, where the prefix defaults to ``/account-config/{account}``.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from blueprints import kinds
from blueprints.errors import (
    AccountNotFoundError,
    EntryNotFoundError,
    InvalidSpecError,
    KeyNotFoundError,
    SourceMalformedError,
    SourceUnreadableError,
)
from blueprints.graph import Reference, ResourceGraph
from blueprints.values import ConfigValue

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_FILE = "cdk.context.json"
DEFAULT_PREFIX_ROOT = "/account-config"
PARAMETER_TIER = "Standard"

ConfigSource = Union[str, "os.PathLike[str]", Mapping[str, Any]]


def default_prefix(account_id: str) -> str:
    return f"{DEFAULT_PREFIX_ROOT}/{account_id}"


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def load_accounts(source: Optional[ConfigSource] = None) -> Dict[str, Dict[str, Any]]:
    """Read and validate an account map from a path or an in-memory mapping."""
    if source is None:
        source = os.path.join(os.getcwd(), DEFAULT_CONTEXT_FILE)

    if isinstance(source, Mapping):
        accounts = copy.deepcopy(dict(source))
        origin = "<mapping>"
    else:
        origin = os.fspath(source)
        try:
            with open(origin, "r", encoding="utf-8") as f:
                content = f.read()
        except UnicodeDecodeError as err:
            raise SourceMalformedError(f"Context file at {origin} is not valid UTF-8: {err}") from err
        except OSError as err:
            raise SourceUnreadableError(f"Failed to read context file at {origin}: {err}") from err
        try:
            accounts = json.loads(content, parse_constant=_reject_constant)
        except ValueError as err:
            raise SourceMalformedError(f"Failed to parse context file at {origin}: {err}") from err

    if not isinstance(accounts, dict):
        raise SourceMalformedError(f"Context at {origin} must be a JSON object keyed by account id")
    for account_id, record in accounts.items():
        if not isinstance(record, dict):
            raise SourceMalformedError(
                f"Configuration for account '{account_id}' in {origin} must be a JSON object"
            )
        for value in record.values():
            ConfigValue.of(value)
        _check_keys(account_id, record, origin)
    return accounts


def parameter_id(key: str) -> str:
    return f"Parameter{capitalize_first(key)}"


def _check_keys(account_id: str, record: Mapping[str, Any], origin: str) -> None:
    # keys map to parameter ids and paths, so they must be non-empty and distinct after capitalizing
    seen: Dict[str, str] = {}
    for key in record:
        if not isinstance(key, str) or not key:
            raise SourceMalformedError(
                f"Configuration for account '{account_id}' in {origin} has an invalid key {key!r}"
            )
        logical_id = parameter_id(key)
        if logical_id in seen:
            raise SourceMalformedError(
                f"Configuration keys '{seen[logical_id]}' and '{key}' for account '{account_id}' "
                f"in {origin} both map to parameter {logical_id}"
            )
        seen[logical_id] = key


@dataclass(frozen=True)
class ConfigEntry:
    key: str
    path: str
    value: str
    entry_id: str
    reference: Reference


class AccountConfiguration:
    """The published configuration of one account. Read-only."""

    def __init__(
        self,
        account_id: str,
        prefix: str,
        record: Mapping[str, Any],
        entries: Tuple[ConfigEntry, ...],
        graph: ResourceGraph,
    ):
        self.account_id = account_id
        self.prefix = prefix
        self.graph = graph
        self._record = MappingProxyType(dict(record))
        self._entries = MappingProxyType({entry.key: entry for entry in entries})

    @property
    def entries(self) -> Tuple[ConfigEntry, ...]:
        return tuple(self._entries.values())

    def get_config_value(self, key: str, default: Any = None) -> Any:
        if key in self._record:
            return copy.deepcopy(self._record[key])
        return default

    def require_config_value(self, key: str) -> Any:
        if key not in self._record:
            raise KeyNotFoundError(key)
        return copy.deepcopy(self._record[key])

    def get_entry(self, key: str) -> ConfigEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise EntryNotFoundError(key, self._entries.keys()) from None

    def has_key(self, key: str) -> bool:
        return key in self._record

    def all_keys(self) -> Tuple[str, ...]:
        return tuple(self._record.keys())


def resolve(
    config_source: Optional[ConfigSource] = None,
    account_id: Optional[str] = None,
    prefix: Optional[str] = None,
    graph: Optional[ResourceGraph] = None,
) -> AccountConfiguration:
    if not account_id:
        raise InvalidSpecError("account_id is required to select a configuration record")

    accounts = load_accounts(config_source)
    if account_id not in accounts:
        raise AccountNotFoundError(account_id, accounts.keys())

    record = accounts[account_id]
    prefix = (prefix or default_prefix(account_id)).rstrip("/")
    graph = graph if graph is not None else ResourceGraph()

    entries = []
    for key, raw in record.items():
        value = ConfigValue.of(raw)
        path = f"{prefix}/{key}"
        logical_id = parameter_id(key)
        parameter = graph.declare(
            kinds.PARAMETER,
            logical_id,
            {
                "parameter_name": path,
                "string_value": value.text,
                "description": f"Account configuration value for {key}",
                "tier": PARAMETER_TIER,
            },
        )
        entries.append(
            ConfigEntry(
                key=key,
                path=path,
                value=value.text,
                entry_id=logical_id,
                reference=parameter.ref("arn"),
            )
        )

    logger.info("Resolved %d configuration entries for account %s under %s", len(entries), account_id, prefix)
    return AccountConfiguration(account_id, prefix, record, tuple(entries), graph)
