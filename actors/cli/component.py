"""Component declaration for the administrative CLI actor."""

from __future__ import annotations

from packages.portal_shared.manifest import (
    ActorManifest,
    ComponentId,
    ModuleRoot,
    register_component,
)

ACTOR_COMPONENT_ID = ComponentId("actor_cli")

MANIFEST = register_component(
    ActorManifest(
        id=ACTOR_COMPONENT_ID,
        layer=2,
        system="action",
        module_roots=frozenset({ModuleRoot("actors.cli")}),
        principal="operator",
    )
)
