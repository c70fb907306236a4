"""Component declaration for Attempt Ledger Service."""

from __future__ import annotations

from packages.portal_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_attempt_ledger")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="state",
        module_roots=frozenset({ModuleRoot("services.state.attempt_ledger")}),
        owns_schema=True,
    )
)
