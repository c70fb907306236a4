"""Postgres fixtures for real-provider integration tests.

Tests run against ``VERIFY_PORTAL_TEST_POSTGRES_URL`` when set, otherwise
against a throwaway ``postgres:16`` container started through the docker CLI.
"""

from __future__ import annotations

import socket
import subprocess
import time
from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine

from packages.portal_core.migrations import run_startup_migrations
from packages.portal_shared.config import PortalSettings
from tests.integration.helpers import (
    external_postgres_url,
    real_provider_tests_enabled,
)

_POSTGRES_IMAGE = "postgres:16"
_CREDENTIALS = {
    "POSTGRES_USER": "portal",
    "POSTGRES_PASSWORD": "portal",
    "POSTGRES_DB": "verify_portal",
}


def _run_command(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(args, check=True, capture_output=True, text=True)


def _docker_available() -> bool:
    try:
        _run_command("docker", "version")
    except (FileNotFoundError, subprocess.CalledProcessError):
        return False
    return True


def _wait_for_tcp(host: str, port: int, *, timeout_seconds: float = 30.0) -> None:
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((host, port), timeout=0.5):
                return
        except OSError:
            time.sleep(0.2)
    raise TimeoutError(f"timed out waiting for TCP endpoint {host}:{port}")


def _wait_for_sql(dsn: str, *, timeout_seconds: float = 60.0) -> None:
    """Wait until Postgres accepts stable SQL connections."""
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        engine = create_engine(dsn, pool_pre_ping=True)
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
            return
        except Exception:  # noqa: BLE001
            time.sleep(0.2)
        finally:
            engine.dispose()
    raise TimeoutError("timed out waiting for Postgres readiness")


@pytest.fixture(scope="session")
def postgres_dsn() -> Iterator[str]:
    """Yield one Postgres DSN for integration tests."""
    if not real_provider_tests_enabled():
        pytest.skip("real-provider integration tests disabled")
    external = external_postgres_url()
    if external is not None:
        yield external
        return
    if not _docker_available():
        pytest.skip("docker unavailable for integration tests")

    env_args: list[str] = []
    for key, value in _CREDENTIALS.items():
        env_args.extend(["--env", f"{key}={value}"])
    container_id = _run_command(
        "docker",
        "run",
        "--detach",
        "--rm",
        "--publish",
        "127.0.0.1::5432",
        *env_args,
        _POSTGRES_IMAGE,
    ).stdout.strip()
    try:
        mapping = _run_command("docker", "port", container_id, "5432/tcp").stdout
        host, port = mapping.strip().splitlines()[0].rsplit(":", maxsplit=1)
        _wait_for_tcp(host, int(port))
        dsn = f"postgresql+psycopg://portal:portal@{host}:{port}/verify_portal"
        _wait_for_sql(dsn)
        yield dsn
    finally:
        subprocess.run(
            ("docker", "stop", container_id),
            check=False,
            capture_output=True,
            text=True,
        )


@pytest.fixture(scope="session")
def integration_settings(postgres_dsn: str) -> PortalSettings:
    """Settings bound to the integration Postgres."""
    return PortalSettings(
        components={"substrate": {"postgres": {"url": postgres_dsn}}}
    )


@pytest.fixture(scope="session")
def migrated_integration_settings(
    integration_settings: PortalSettings,
) -> PortalSettings:
    """Provision schemas, run every service migration, and return settings."""
    run_startup_migrations(settings=integration_settings)
    return integration_settings
