"""Shared test fixtures for Ring Insight tests."""

import logging
from datetime import datetime, timedelta

import pytest

from ring_insight.logging_config import ROOT_LOGGER
from ring_insight.model import CASSANDRA_YAML, NodeArtifacts


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


START = datetime(2023, 1, 15, 10, 0, 0)


@pytest.fixture
def log_start():
    """Timestamp of the first line built by the log fixtures."""
    return START


@pytest.fixture
def log_line():
    """Factory for a system.log line in the default layout."""

    def make(message, when=START, level="WARN", source="NoSpamLogger.java:94"):
        return f"{level}  [ScheduledTasks:1] {when:%Y-%m-%d %H:%M:%S},123 {source} - {message}"

    return make


@pytest.fixture
def spread_lines(log_line):
    """Factory for ``count`` copies of a message, ``step`` apart starting at START."""

    def make(message, count, step=timedelta(minutes=1), source="NoSpamLogger.java:94"):
        return [log_line(message, START + i * step, source=source) for i in range(count)]

    return make


@pytest.fixture
def node_bundle():
    """Factory for a complete, healthy NodeArtifacts bundle."""

    def make(name, release="3.11.14", settings=None, logs=None, metrics=None, **kwargs):
        values = {
            "name": name,
            "listen_address": name,
            "release": release,
            "status": [],
            "ring": [],
            "gossip": {},
            "info": {"data_center": "dc1", "rack": "rack1", "load": 1000, "uptime_seconds": 3600},
            "configs": {CASSANDRA_YAML: dict(settings or {"num_tokens": "16"})},
            "logs": list(logs or []),
            "metrics": dict(metrics or {}),
            "sstable_statistics": [],
        }
        values.update(kwargs)
        return NodeArtifacts(**values)

    return make


@pytest.fixture
def log_dir_bundles(node_bundle):
    """Three nodes; C runs an unrecognized release, A logs elsewhere."""
    return [
        node_bundle("node_a", "3.11.14", settings={"log_dir": "/var/log/a", "num_tokens": "16"}),
        node_bundle("node_b", "3.11.14", settings={"log_dir": "/var/log/cassandra", "num_tokens": "16"}),
        node_bundle("node_c", "9.9.9", settings={"log_dir": "/var/log/cassandra", "num_tokens": "16"}),
    ]


class FakeReleaseNotes:
    """ReleaseNotesSource returning canned text, or raising."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def fetch(self, notes_file, timeout):
        self.calls.append(notes_file)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_notes():
    return FakeReleaseNotes


@pytest.fixture
def package_logger():
    """The ring_insight logger, restored to a pristine state afterwards."""
    logger = logging.getLogger(ROOT_LOGGER)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
