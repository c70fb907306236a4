"""Administrative portal CLI actor implemented with Typer."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import typer

from actors.cli.component import MANIFEST
from packages.portal_core.main import PortalServices, build_services
from packages.portal_core.migrations import (
    MigrationExecutionError,
    run_startup_migrations,
)
from packages.portal_shared.config import PortalSettings, load_settings
from packages.portal_shared.envelope import Envelope, EnvelopeKind, EnvelopeMeta, new_meta
from packages.portal_shared.errors import ErrorCategory, codes
from packages.portal_shared.logging import configure_logging

SUCCESS_EXIT_CODE = 0
DOMAIN_ERROR_EXIT_CODE = 3
DEPENDENCY_ERROR_EXIT_CODE = 4


@dataclass(frozen=True)
class CliConfig:
    """Global CLI options propagated to service calls."""

    config_file: Path | None
    principal: str
    source: str
    as_json: bool
    trace_id: str | None


def _serialize(value: Any) -> Any:
    """Convert result objects to JSON-serializable structures."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, Path)):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    if hasattr(value, "model_dump"):
        return _serialize(value.model_dump(mode="python"))
    return str(value)


def _emit_output(result: Any, as_json: bool) -> None:
    """Render command output in the requested format."""
    data = _serialize(result)
    if as_json:
        typer.echo(json.dumps(data, sort_keys=True, separators=(",", ":")))
        return
    rendered = _render_human(data)
    typer.echo(rendered if rendered is not None else str(data))


def _emit_error(message: str, code: str, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps({"error": message, "code": code}), err=True)
        return
    typer.echo(f"error: {message} ({code})", err=True)


def _render_human(data: Any) -> str | None:
    """Return human-oriented rendering for recognized response shapes."""
    if isinstance(data, list) and all(_looks_like_attempt(item) for item in data):
        return _render_attempts(data)
    if isinstance(data, (dict, list)):
        return json.dumps(data, indent=2, sort_keys=True)
    return None


def _looks_like_attempt(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and "requester_id" in value
        and "consecutive_failures" in value
    )


def _render_attempts(items: list[dict[str, Any]]) -> str:
    if len(items) == 0:
        return "No attempt records found."
    lines: list[str] = []
    for item in items:
        state = "BLOCKED" if item.get("blocked") else "open"
        lines.append(
            f"- {item['requester_id']} / {item['subject_id']}: "
            f"{item['consecutive_failures']} failure(s), {state}"
        )
    return "\n".join(lines)


def _render_unblock(
    *, requester_id: str, count: int, deleted: bool, verb: str, as_json: bool
) -> Any:
    if as_json:
        return {"requester_id": requester_id, "records": count, "deleted": deleted}
    return f"{verb} {count} attempt record(s) for {requester_id}"


def _exit_code_for(category: ErrorCategory) -> int:
    if category == ErrorCategory.DEPENDENCY:
        return DEPENDENCY_ERROR_EXIT_CODE
    return DOMAIN_ERROR_EXIT_CODE


def _load_cli_settings(cfg: CliConfig) -> PortalSettings:
    settings = load_settings(config_path=cfg.config_file)
    configure_logging(
        level="WARNING",
        json_output=False,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )
    return settings


def _build_services(cfg: CliConfig) -> PortalServices:
    return build_services(settings=_load_cli_settings(cfg))


def _meta(cfg: CliConfig) -> EnvelopeMeta:
    return new_meta(
        kind=EnvelopeKind.COMMAND,
        source=cfg.source,
        principal=cfg.principal,
        trace_id=cfg.trace_id,
    )


def _run_command(
    cfg: CliConfig,
    invoke: Callable[[PortalServices, EnvelopeMeta], Envelope[Any]],
    render: Callable[[Any], Any] = lambda value: value,
) -> None:
    """Execute one service call and map its envelope to process semantics."""
    services = _build_services(cfg)
    try:
        result = invoke(services, _meta(cfg))
    finally:
        if services.substrate is not None:
            services.substrate.dispose()

    if not result.ok:
        first = result.errors[0]
        _emit_error(first.message, first.code, cfg.as_json)
        raise typer.Exit(code=_exit_code_for(first.category))

    value = None if result.payload is None else result.payload.value
    _emit_output(render(value), cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(no_args_is_help=True, help="Verification portal administration")


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None,
        envvar="VERIFY_PORTAL_CONFIG_FILE",
        help="Portal YAML configuration file",
    ),
    principal: str = typer.Option(MANIFEST.principal, help="Envelope principal"),
    source: str = typer.Option("cli", help="Envelope source"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    trace_id: str | None = typer.Option(None, help="Optional trace id"),
) -> None:
    """Store global options for all commands."""
    ctx.obj = CliConfig(
        config_file=config_file,
        principal=principal,
        source=source,
        as_json=as_json,
        trace_id=trace_id,
    )


@app.command("unblock")
def unblock_command(
    ctx: typer.Context,
    requester_id: str = typer.Argument(..., help="Verifier identity to unblock"),
    delete: bool = typer.Option(
        False, "--delete", help="Delete attempt records instead of resetting them"
    ),
    subject: str | None = typer.Option(
        None, "--subject", help="Reset only this subject's pair"
    ),
) -> None:
    """Lift every block for one verifier, or one pair with ``--subject``."""
    cfg = _require_config(ctx)
    if subject is not None and delete:
        _emit_error(
            "--subject cannot be combined with --delete",
            codes.INVALID_ARGUMENT,
            cfg.as_json,
        )
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE)

    def _invoke(services: PortalServices, meta: EnvelopeMeta) -> Envelope[Any]:
        ledger = services.attempt_ledger
        if subject is not None:
            return ledger.reset(
                meta=meta, requester_id=requester_id, subject_id=subject
            )
        if delete:
            return ledger.clear_requester(meta=meta, requester_id=requester_id)
        return ledger.reset_requester(meta=meta, requester_id=requester_id)

    verb = "Deleted" if delete else "Reset"
    _run_command(
        cfg,
        _invoke,
        render=lambda value: _render_unblock(
            requester_id=requester_id,
            count=value if subject is None else int(value is not None),
            deleted=delete,
            verb=verb,
            as_json=cfg.as_json,
        ),
    )


@app.command("attempts")
def attempts_command(
    ctx: typer.Context,
    requester: str | None = typer.Option(None, help="Only this verifier"),
    blocked_only: bool = typer.Option(
        False, "--blocked-only", help="Only blocked pairs"
    ),
    limit: int = typer.Option(100, min=1, help="Maximum number of records"),
) -> None:
    """List attempt records, newest attempt first."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda services, meta: services.attempt_ledger.list_attempts(
            meta=meta,
            requester_id=requester,
            blocked_only=blocked_only,
            limit=limit,
        ),
    )


@app.command("purge-access-logs")
def purge_access_logs_command(ctx: typer.Context) -> None:
    """Delete access log entries past the retention window."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda services, meta: services.access_log.purge_expired(meta=meta),
        render=lambda count: (
            {"deleted": count}
            if cfg.as_json
            else f"Purged {count} expired access log entries"
        ),
    )


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Report gate and dependency readiness."""
    cfg = _require_config(ctx)
    _run_command(
        cfg, lambda services, meta: services.validation_gate.health(meta=meta)
    )


@app.command("migrate")
def migrate_command(ctx: typer.Context) -> None:
    """Provision service schemas and apply every Alembic chain."""
    cfg = _require_config(ctx)
    settings = _load_cli_settings(cfg)
    try:
        result = run_startup_migrations(settings=settings)
    except MigrationExecutionError as exc:
        _emit_error(str(exc), "MIGRATION_FAILED", cfg.as_json)
        raise typer.Exit(code=DEPENDENCY_ERROR_EXIT_CODE) from exc
    _emit_output(
        {
            "provisioned_schemas": list(result.provisioned_schemas),
            "executed_alembic_configs": list(result.executed_alembic_configs),
        },
        cfg.as_json,
    )
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


if __name__ == "__main__":
    app()
