"""Repository-wide pytest configuration."""

pytest_plugins = ("tests.integration.fixtures",)
