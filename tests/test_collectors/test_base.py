"""Tests for BaseCollector class."""

import logging

import pytest

from kibana_exporter.collectors.base import BaseCollector, safe_scrape
from kibana_exporter.services.status_client import NetworkError, UnexpectedStatusError


class MockCollector(BaseCollector):
    """Mock collector for testing BaseCollector functionality."""

    def __init__(self, client=None, logger=None):
        if logger is None:
            logger = logging.getLogger(__name__)
        super().__init__(client, logger)

    def describe(self):
        return []

    def collect(self):
        return []

    @safe_scrape
    def scrape(self, outcome):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestBaseCollector:
    """Test suite for BaseCollector."""

    def test_collector_logger_hierarchy(self):
        """Test that collector creates child logger."""
        parent_logger = logging.getLogger("test_parent")
        collector = MockCollector(logger=parent_logger)

        assert collector.logger.parent == parent_logger
        assert collector.logger.name == "test_parent.MockCollector"

    def test_collector_keeps_client(self):
        """Test collector initialization with a client."""
        client = object()
        collector = MockCollector(client)

        assert collector.client is client

    def test_cannot_instantiate_abstract(self):
        """Test that describe/collect must be implemented."""
        with pytest.raises(TypeError):
            BaseCollector(None, logging.getLogger(__name__))


class TestSafeScrape:
    """Test suite for the safe_scrape decorator."""

    def test_passes_result_through(self):
        """Test successful calls return their value."""
        assert MockCollector().scrape("document") == "document"

    def test_client_error_returns_none(self, caplog):
        """Test client errors are logged without traceback and swallowed."""
        collector = MockCollector()

        with caplog.at_level(logging.ERROR):
            result = collector.scrape(UnexpectedStatusError(502, "bad gateway"))

        assert result is None
        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.error_kind == "UnexpectedStatusError"
        assert record.exc_info is None

    def test_network_error_returns_none(self):
        """Test network errors are swallowed."""
        error = NetworkError("http://kibana.test/api/status", OSError("unreachable"))

        assert MockCollector().scrape(error) is None

    def test_unexpected_error_logged_with_traceback(self, caplog):
        """Test unexpected exceptions are swallowed and logged with a traceback."""
        collector = MockCollector()

        with caplog.at_level(logging.ERROR):
            result = collector.scrape(KeyError("boom"))

        assert result is None
        assert caplog.records[-1].exc_info is not None

    def test_preserves_function_metadata(self):
        """Test functools.wraps is applied."""
        assert MockCollector.scrape.__name__ == "scrape"
