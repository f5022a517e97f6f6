"""Tests for the exposition server WSGI app."""

from unittest.mock import Mock
from wsgiref.util import setup_testing_defaults

import httpx
import pytest

from kibana_exporter.collectors.kibana_collector import KibanaCollector
from kibana_exporter.config.models import ServerConfig
from kibana_exporter.server import ExporterServer, SampleCollector
from kibana_exporter.services.status_client import StatusClient


def call(app, path):
    """Invoke a WSGI app and return (status, headers, body)."""
    environ = {"PATH_INFO": path}
    setup_testing_defaults(environ)
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body.decode("utf-8")


@pytest.fixture
def green_status():
    return {
        "status": {"overall": {"level": "green"}, "core": {"elasticsearch": {"level": "available"}}},
        "metrics": {"requests": {"total": 5, "status_codes": {"200": 5}}},
    }


@pytest.fixture
def make_server(make_client, logger):
    """Factory building an ExporterServer around a mocked upstream."""
    def factory(handler, metrics_path="/metrics"):
        collector = KibanaCollector(make_client(handler), logger)
        return ExporterServer(collector, ServerConfig(metrics_path=metrics_path), logger, version="1.2.3")
    return factory


class TestMetricsEndpoint:
    """Test suite for the metrics path."""

    def test_metrics_success(self, make_server, json_handler, green_status):
        server = make_server(json_handler(green_status))

        status, headers, body = call(server.app, "/metrics")

        assert status.startswith("200")
        assert headers["Content-Type"].startswith("text/plain")
        assert "kibana_up 1.0" in body
        assert "kibana_scrape_success 1.0" in body
        assert "kibana_status_overall 1.0" in body
        assert 'kibana_status_core{name="elasticsearch"} 1.0' in body
        assert 'kibana_requests_total{status="total"} 5.0' in body
        assert 'kibana_requests_total{status="200"} 5.0' in body
        assert "# TYPE kibana_requests counter" in body
        assert "kibana_heap_total_bytes" not in body

    def test_metrics_upstream_failure_still_renders(self, make_server):
        def handler(request):
            return httpx.Response(500, text="internal error")

        server = make_server(handler)

        status, _, body = call(server.app, "/metrics")

        assert status.startswith("200")
        assert "kibana_up 0.0" in body
        assert "kibana_scrape_success 0.0" in body
        assert "kibana_scrape_duration_seconds" in body
        assert "kibana_status_overall" not in body

    def test_custom_metrics_path(self, make_server, json_handler, green_status):
        server = make_server(json_handler(green_status), metrics_path="/kibana/metrics")

        assert "kibana_up 1.0" in call(server.app, "/kibana/metrics")[2]
        assert call(server.app, "/metrics")[0].startswith("404")


class TestHealthEndpoints:
    """Test suite for /health, /ready and the landing page."""

    def test_health_never_touches_collector(self, logger):
        collector = Mock(spec=KibanaCollector)
        collector.describe.return_value = []
        server = ExporterServer(collector, ServerConfig(), logger)

        status, _, body = call(server.app, "/health")

        assert status.startswith("200")
        assert body == "OK"
        collector.collect.assert_not_called()
        collector.check_health.assert_not_called()

    def test_ready_success(self, make_server):
        server = make_server(lambda request: httpx.Response(200, text="not even json"))

        status, _, body = call(server.app, "/ready")

        assert status.startswith("200")
        assert body == "READY"

    def test_ready_failure(self, make_server):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        server = make_server(handler)

        status, _, body = call(server.app, "/ready")

        assert status.startswith("503")
        assert body.startswith("NOT READY: ")
        assert "connection refused" in body

    def test_ready_invalid_url(self, make_server):
        """Test an unusable upstream URL reports not ready instead of failing the request."""
        def handler(request):
            raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

        server = make_server(handler)

        status, _, body = call(server.app, "/ready")

        assert status.startswith("503")
        assert body.startswith("NOT READY: ")

    def test_landing_page(self, make_server, json_handler):
        server = make_server(json_handler({}), metrics_path="/custom")

        status, headers, body = call(server.app, "/")

        assert status.startswith("200")
        assert headers["Content-Type"].startswith("text/html")
        assert "Version: 1.2.3" in body
        assert "href='/custom'" in body

    def test_unknown_path(self, make_server, json_handler):
        server = make_server(json_handler({}))

        assert call(server.app, "/nope")[0].startswith("404")


class TestSampleCollector:
    """Test suite for the prometheus_client adapter."""

    def test_describe_does_not_fetch(self, logger):
        client = Mock(spec=StatusClient)
        adapter = SampleCollector(KibanaCollector(client, logger))

        families = adapter.describe()

        assert len(families) == 23
        assert all(f.samples == [] for f in families)
        client.fetch.assert_not_called()
