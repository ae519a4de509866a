"""
Pytest configuration and shared fixtures for nativedep tests.
"""

import logging

import pytest

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.libraries import (
    identity,
    linux_platform,
    linux_arm_platform,
    macos_platform,
    windows_platform,
    acquire_config,
    layout,
)
from tests.mocks.process import FakeRunner


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without side effects")
    config.addinivalue_line(
        "markers", "integration: tests that start real subprocesses"
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Process runner that records commands instead of running them."""
    return FakeRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove environment variables that change acquisition behaviour."""
    for name in (
        "TF_RUST_BUILD_FROM_SRC",
        "TF_RUST_DOWNLOAD_DIR",
        "TF_RUST_BAZEL_OPTS",
        "CARGO_FEATURE_TENSORFLOW_GPU",
        "OUT_DIR",
        "CARGO_MANIFEST_DIR",
        "NUM_JOBS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop stream handlers installed by CLI runs."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)
