"""Discovery and import of ``component.py`` declaration modules."""

from __future__ import annotations

import importlib
from pathlib import Path

_DISCOVERY_ROOTS = ("actors", "services", "resources")


def discover_component_modules(repo_root: Path | None = None) -> tuple[str, ...]:
    """Return dotted import paths for every manifest-declaring ``component.py``."""
    root = (repo_root or Path(__file__).resolve().parents[2]).resolve()
    modules: list[str] = []
    for discovery_root in _DISCOVERY_ROOTS:
        package_root = root / discovery_root
        if not package_root.exists():
            continue
        for component_file in sorted(package_root.rglob("component.py")):
            source = component_file.read_text(encoding="utf-8")
            if "MANIFEST" not in source or "register_component(" not in source:
                continue
            rel = component_file.relative_to(root).with_suffix("")
            modules.append(".".join(rel.parts))
    return tuple(modules)


def import_registered_component_modules(
    repo_root: Path | None = None,
) -> tuple[str, ...]:
    """Import all discovered component modules so their manifests register."""
    modules = discover_component_modules(repo_root=repo_root)
    for module in modules:
        importlib.import_module(module)
    return modules
