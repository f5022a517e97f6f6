"""HTTP exposition server: /metrics, /health, /ready and a landing page."""

import logging
from socketserver import ThreadingMixIn
from typing import Iterable, List, Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.core import Metric

from .collectors.kibana_collector import KibanaCollector
from .config.models import ServerConfig
from .services.status_client import StatusClientError
from .utils.metrics import to_metric_families


LANDING_PAGE = """<html>
<head><title>Kibana Prometheus Exporter</title></head>
<body>
<h1>Kibana Prometheus Exporter</h1>
<p>Version: {version}</p>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


class SampleCollector:
    """Adapt a KibanaCollector to prometheus_client's custom collector protocol."""

    def __init__(self, collector: KibanaCollector):
        self.collector = collector

    def describe(self) -> List[Metric]:
        return [descriptor.empty_family() for descriptor in self.collector.describe()]

    def collect(self) -> Iterable[Metric]:
        return to_metric_families(self.collector.describe(), self.collector.collect())


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Handles each request on its own daemon thread."""
    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    logger = logging.getLogger(__name__)

    def log_message(self, format, *args):
        self.logger.debug(format % args, extra={"client": self.address_string()})


def _http_response(start_response, status: str, headers: List[Tuple[str, str]], body: bytes):
    start_response(status, headers)
    return [body]


class ExporterServer:
    """
    WSGI application and listener for the exporter.

    Owns a private CollectorRegistry holding only the Kibana collector.
    """

    def __init__(
        self,
        collector: KibanaCollector,
        config: ServerConfig,
        logger: logging.Logger,
        version: str = "dev"
    ):
        """
        Initialize exporter server.

        Args:
            collector: Collector serving /metrics and /ready
            config: Listener configuration
            logger: Logger instance
            version: Version shown on the landing page
        """
        self.collector = collector
        self.config = config
        self.version = version
        self.logger = logger.getChild(self.__class__.__name__)

        self.registry = CollectorRegistry()
        self.registry.register(SampleCollector(collector))
        self._metrics_app = make_wsgi_app(self.registry)
        self._server = None

    def app(self, environ, start_response):
        """WSGI entry point."""
        path = environ.get("PATH_INFO", "/")

        if path == self.config.metrics_path:
            return self._metrics_app(environ, start_response)

        if path == "/health":
            return _http_response(
                start_response,
                "200 OK",
                [("Content-Type", "text/plain; charset=utf-8")],
                b"OK",
            )

        if path == "/ready":
            try:
                self.collector.check_health()
            except StatusClientError as e:
                self.logger.warning(f"Readiness check failed: {e}")
                return _http_response(
                    start_response,
                    "503 Service Unavailable",
                    [("Content-Type", "text/plain; charset=utf-8")],
                    f"NOT READY: {e}".encode("utf-8"),
                )
            return _http_response(
                start_response,
                "200 OK",
                [("Content-Type", "text/plain; charset=utf-8")],
                b"READY",
            )

        if path == "/":
            page = LANDING_PAGE.format(version=self.version, metrics_path=self.config.metrics_path)
            return _http_response(
                start_response,
                "200 OK",
                [("Content-Type", "text/html; charset=utf-8")],
                page.encode("utf-8"),
            )

        return _http_response(
            start_response,
            "404 Not Found",
            [("Content-Type", "text/plain; charset=utf-8")],
            b"not found\n",
        )

    def serve_forever(self) -> None:
        """
        Bind the listen address and serve until interrupted.

        Raises:
            OSError: If the address cannot be bound
        """
        host, port = self.config.host_port
        self._server = make_server(
            host, port, self.app,
            server_class=_ThreadingWSGIServer,
            handler_class=_LoggingRequestHandler
        )
        self.logger.info(
            "Starting HTTP server",
            extra={"address": self.config.listen_address, "metrics_path": self.config.metrics_path}
        )
        self._server.serve_forever()

    def close(self) -> None:
        """Close the listening socket; call once serve_forever() has returned."""
        if self._server is not None:
            self._server.server_close()
            self._server = None
