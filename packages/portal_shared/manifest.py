"""Component manifests and the process-local registry.

Each service, substrate and actor declares one manifest in its
``component.py``. The migration runner reads the registry to provision one
Postgres schema per service before running that service's Alembic chain.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from threading import RLock
from typing import Final, FrozenSet, Literal, NewType

ComponentId = NewType("ComponentId", str)
ModuleRoot = NewType("ModuleRoot", str)

Layer = Literal[0, 1, 2]
System = Literal["state", "action"]

_SYSTEM_ORDER: Final[dict[str, int]] = {"state": 0, "action": 1}
_COMPONENT_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z][a-z0-9_]{1,62}$")
_MODULE_ROOT_RE: Final[re.Pattern[str]] = re.compile(
    r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)*$"
)


class ManifestError(ValueError):
    """Raised when manifest definitions or registration are invalid."""


@dataclass(frozen=True, slots=True)
class ComponentManifest:
    """Base manifest model for any portal component."""

    id: ComponentId
    layer: Layer
    system: System
    module_roots: FrozenSet[ModuleRoot]

    def __post_init__(self) -> None:
        validate_component_id(self.id)
        if not self.module_roots:
            raise ManifestError("module_roots must not be empty")
        for root in self.module_roots:
            if not _MODULE_ROOT_RE.fullmatch(str(root)):
                raise ManifestError(f"invalid module root '{root}'")


@dataclass(frozen=True, slots=True)
class ResourceManifest(ComponentManifest):
    """L0 substrate shared by services."""

    layer: Literal[0]


@dataclass(frozen=True, slots=True)
class ServiceManifest(ComponentManifest):
    """L1 service; state services own one Postgres schema named by their id."""

    layer: Literal[1]
    owns_schema: bool = False

    @property
    def schema_name(self) -> str:
        return str(self.id)


@dataclass(frozen=True, slots=True)
class ActorManifest(ComponentManifest):
    """L2 actor that drives services on behalf of a principal."""

    layer: Literal[2]
    principal: str = "operator"


@dataclass(slots=True)
class ManifestRegistry:
    """In-memory registry keyed by component id."""

    _components: dict[ComponentId, ComponentManifest] = field(default_factory=dict)
    _lock: RLock = field(default_factory=RLock)

    def register_component(self, manifest: ComponentManifest) -> None:
        """Register one manifest; re-registering the identical manifest is a no-op."""
        with self._lock:
            existing = self._components.get(manifest.id)
            if existing is not None and existing != manifest:
                raise ManifestError(f"duplicate component id: {manifest.id}")
            self._components[manifest.id] = manifest

    def get_component(self, component_id: ComponentId) -> ComponentManifest:
        try:
            return self._components[component_id]
        except KeyError as exc:
            raise ManifestError(f"component not registered: {component_id}") from exc

    def list_services(self) -> tuple[ServiceManifest, ...]:
        """Return services sorted state-first, then by id."""
        services = [
            item
            for item in self._components.values()
            if isinstance(item, ServiceManifest)
        ]
        return tuple(
            sorted(services, key=lambda item: (_SYSTEM_ORDER[item.system], str(item.id)))
        )

    def list_components(self) -> tuple[ComponentManifest, ...]:
        return tuple(sorted(self._components.values(), key=lambda item: str(item.id)))


def validate_component_id(value: ComponentId) -> None:
    """Validate component-id format; ids double as Postgres schema names."""
    if not _COMPONENT_ID_RE.fullmatch(str(value)):
        raise ManifestError(
            f"invalid component id '{value}'; expected ^[a-z][a-z0-9_]{{1,62}}$"
        )


_DEFAULT_REGISTRY = ManifestRegistry()


def register_component(manifest: ComponentManifest) -> ComponentManifest:
    """Register a component manifest in the default process-local registry."""
    _DEFAULT_REGISTRY.register_component(manifest)
    return manifest


def get_registry() -> ManifestRegistry:
    return _DEFAULT_REGISTRY
