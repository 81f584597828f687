"""Shared fixtures for CLI tests."""

import pytest
from typer.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Typer CLI runner."""
    return CliRunner()
