from typing import Iterable


class BlueprintError(Exception):
    """Base class for every error raised while expanding a blueprint."""


# Input errors: the caller handed us something we cannot expand.
class InputError(BlueprintError):
    pass


class InvalidSpecError(InputError, ValueError):
    pass


class SourceMalformedError(InputError):
    pass


class AccountNotFoundError(InputError, LookupError):
    def __init__(self, account_id: str, available: Iterable[str]):
        self.account_id = account_id
        self.available = list(available)
        super().__init__(
            f"No configuration found for account ID '{account_id}'. "
            f"Available accounts: {', '.join(self.available)}"
        )


# Collaborator errors: something outside the core failed.
class CollaboratorError(BlueprintError):
    pass


class ZoneNotFoundError(CollaboratorError, LookupError):
    def __init__(self, zone_name: str, reason: str = "no matching hosted zone"):
        self.zone_name = zone_name
        super().__init__(f"Hosted zone for '{zone_name}' could not be resolved: {reason}")


class SourceUnreadableError(CollaboratorError):
    pass


# Usage errors: the calling code is wrong.
class UsageError(BlueprintError):
    pass


class DuplicateIdError(UsageError):
    def __init__(self, logical_id: str):
        self.logical_id = logical_id
        super().__init__(f"Resource '{logical_id}' is already declared in this graph")


class UnresolvedDependencyError(UsageError):
    def __init__(self, logical_id: str, missing: Iterable[str]):
        self.logical_id = logical_id
        self.missing = sorted(missing)
        super().__init__(
            f"Resource '{logical_id}' depends on undeclared resource(s): {', '.join(self.missing)}"
        )


class NotYetResolvedError(UsageError):
    def __init__(self, logical_id: str):
        self.logical_id = logical_id
        super().__init__(f"Resource '{logical_id}' has not been declared yet")


class EntryNotFoundError(UsageError, LookupError):
    def __init__(self, key: str, available: Iterable[str]):
        self.key = key
        self.available = list(available)
        super().__init__(
            f"Parameter '{key}' not found. Available parameters: {', '.join(self.available)}"
        )


class KeyNotFoundError(UsageError, LookupError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Configuration key '{key}' is not set")


class FirewallNotDeclaredError(UsageError):
    def __init__(self):
        super().__init__("WAF is not enabled for this website")
