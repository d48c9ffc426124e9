"""
Resource graph builder.

Policies declare resources into a ``ResourceGraph`` one at a time. A resource
may only reference resources that are already declared, so declaration order
is always a valid creation order and no cycle check is needed.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Set, Tuple, Union

from blueprints.errors import DuplicateIdError, NotYetResolvedError, UnresolvedDependencyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """A generated identifier of a declared resource.

    ``attribute=None`` stands for the resource itself (CloudFormation ``Ref``).
    """

    logical_id: str
    attribute: Optional[str] = None

    def __str__(self) -> str:
        if self.attribute is None:
            return "${%s}" % self.logical_id
        return "${%s.%s}" % (self.logical_id, self.attribute)


@dataclass(frozen=True)
class Join:
    """Literal text and references concatenated into one string."""

    parts: Tuple[Union[str, Reference], ...]

    def __str__(self) -> str:
        return "".join(str(part) for part in self.parts)

    def references(self) -> Tuple[Reference, ...]:
        return tuple(part for part in self.parts if isinstance(part, Reference))


def join(*parts: Union[str, Reference]) -> Join:
    return Join(tuple(parts))


@dataclass(frozen=True)
class Resource:
    logical_id: str
    kind: str
    properties: Mapping[str, Any]
    depends_on: Tuple[str, ...]


def freeze(value: Any) -> Any:
    """Deep-copy ``value`` into read-only containers."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze`` for engines that want plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (tuple, frozenset)):
        return [thaw(item) for item in value]
    return value


def collect_references(value: Any) -> Iterator[Reference]:
    if isinstance(value, Reference):
        yield value
    elif isinstance(value, Join):
        yield from value.references()
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from collect_references(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from collect_references(item)


class ResourceHandle:
    """Points at one logical id of a graph, declared or not."""

    def __init__(self, graph: "ResourceGraph", logical_id: str):
        self._graph = graph
        self.logical_id = logical_id

    @property
    def declared(self) -> bool:
        return self.logical_id in self._graph

    @property
    def resource(self) -> Resource:
        return self._graph.get(self.logical_id)

    def ref(self, attribute: Optional[str] = None) -> Reference:
        if not self.declared:
            raise NotYetResolvedError(self.logical_id)
        return Reference(self.logical_id, attribute)

    def __repr__(self) -> str:
        state = "declared" if self.declared else "pending"
        return f"<ResourceHandle {self.logical_id} ({state})>"


class ResourceGraph:
    def __init__(self):
        self._resources: Dict[str, Resource] = {}

    def declare(
        self,
        kind: str,
        logical_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        depends_on: Iterable[str] = (),
    ) -> ResourceHandle:
        if logical_id in self._resources:
            raise DuplicateIdError(logical_id)

        properties = properties or {}
        edges = []
        for dependency in list(depends_on) + [r.logical_id for r in collect_references(properties)]:
            if dependency not in edges:
                edges.append(dependency)

        missing: Set[str] = {dep for dep in edges if dep not in self._resources}
        if missing:
            raise UnresolvedDependencyError(logical_id, missing)

        self._resources[logical_id] = Resource(
            logical_id=logical_id,
            kind=kind,
            properties=freeze(properties),
            depends_on=tuple(edges),
        )
        logger.debug("Declared %s %s (depends on: %s)", kind, logical_id, ", ".join(edges) or "-")
        return ResourceHandle(self, logical_id)

    def handle(self, logical_id: str) -> ResourceHandle:
        return ResourceHandle(self, logical_id)

    def get(self, logical_id: str) -> Resource:
        try:
            return self._resources[logical_id]
        except KeyError:
            raise NotYetResolvedError(logical_id) from None

    def of_kind(self, kind: str) -> Tuple[Resource, ...]:
        return tuple(r for r in self._resources.values() if r.kind == kind)

    def declarations(self) -> Iterator[Tuple[str, Mapping[str, Any], Tuple[str, ...]]]:
        """(kind, properties, depends_on) triples in declaration order."""
        for resource in self._resources.values():
            yield resource.kind, resource.properties, resource.depends_on

    def __iter__(self) -> Iterator[Resource]:
        return iter(tuple(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, logical_id: object) -> bool:
        return logical_id in self._resources
