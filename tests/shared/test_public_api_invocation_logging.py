"""Static checks for public API invocation instrumentation decorators.

These checks enforce that each registered service implementation decorates all
public methods declared on its abstract Service API with shared public API
instrumentation.
"""

from __future__ import annotations

import ast
from pathlib import Path

from packages.portal_shared.component_loader import import_registered_component_modules
from packages.portal_shared.manifest import ServiceManifest, get_registry

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_registered_services_decorate_public_api_methods() -> None:
    """Require instrumentation on all public methods declared in Service APIs."""
    failures: list[str] = []
    checked = 0
    for service in _load_services():
        contract_methods = _service_contract_public_methods(service)
        if not contract_methods:
            continue
        checked += 1
        missing = sorted(contract_methods - _service_decorated_methods(service))
        if missing:
            failures.append(f"{service.id}: {missing}")

    assert checked >= 4
    assert not failures, (
        "Missing @public_api_instrumented on Service public API methods:\n"
        + "\n".join(failures)
    )


def _load_services() -> tuple[ServiceManifest, ...]:
    """Import component manifests and return registered service manifests."""
    import_registered_component_modules()
    return get_registry().list_services()


def _service_contract_public_methods(service: ServiceManifest) -> set[str]:
    """Return abstract public method names declared by ``service.py`` contracts."""
    names: set[str] = set()
    for root in sorted(str(item) for item in service.module_roots):
        file_path = _module_to_file(f"{root}.service")
        if file_path is None:
            continue
        module = ast.parse(file_path.read_text(encoding="utf-8"))
        for node in module.body:
            if not isinstance(node, ast.ClassDef):
                continue
            for child in node.body:
                if (
                    isinstance(child, ast.FunctionDef)
                    and not child.name.startswith("_")
                    and _is_abstract(child)
                ):
                    names.add(child.name)
    return names


def _service_decorated_methods(service: ServiceManifest) -> set[str]:
    """Return public method names decorated in service implementation modules."""
    names: set[str] = set()
    for root in sorted(str(item) for item in service.module_roots):
        file_path = _module_to_file(f"{root}.implementation")
        if file_path is None:
            continue
        module = ast.parse(file_path.read_text(encoding="utf-8"))
        for node in module.body:
            if not isinstance(node, ast.ClassDef):
                continue
            for child in node.body:
                if (
                    isinstance(child, ast.FunctionDef)
                    and not child.name.startswith("_")
                    and _has_public_api_instrumented(child)
                ):
                    names.add(child.name)
    return names


def _module_to_file(module: str) -> Path | None:
    path = REPO_ROOT / (module.replace(".", "/") + ".py")
    return path if path.exists() else None


def _is_abstract(node: ast.FunctionDef) -> bool:
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name) and decorator.id == "abstractmethod":
            return True
        if isinstance(decorator, ast.Attribute) and decorator.attr == "abstractmethod":
            return True
    return False


def _has_public_api_instrumented(node: ast.FunctionDef) -> bool:
    """Return whether method decorators include ``@public_api_instrumented``."""
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if isinstance(target, ast.Name) and target.id == "public_api_instrumented":
            return True
    return False
