"""Unit tests configuration file."""

import io
import os

import pytest

from memlayout.report import ReportWriter
from memlayout.report.driver import build_context
from memlayout.structures import load

DATA_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), "data")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def database():
    return load(os.path.join(DATA_DIR, "sample.structdef"))


@pytest.fixture
def context(database):
    return build_context(database, "v0.47.05 linux64")


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def writer(output):
    return ReportWriter(output)
