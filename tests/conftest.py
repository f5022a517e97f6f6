"""Shared pytest configuration and fixtures."""

import json

import httpx
import pytest

from kibana_exporter.config.models import KibanaConfig
from kibana_exporter.services.status_client import StatusClient
from kibana_exporter.utils.logger import setup_logger


KIBANA_URL = "http://kibana.test:5601"


@pytest.fixture
def logger():
    """Create logger for tests."""
    test_logger = setup_logger("test", level="DEBUG")
    # Let caplog see records
    test_logger.propagate = True
    return test_logger


@pytest.fixture
def kibana_config():
    """Kibana configuration without credentials."""
    return KibanaConfig(url=KIBANA_URL, timeout_seconds=2)


@pytest.fixture
def full_status():
    """Status document with every optional field populated."""
    return {
        "name": "kibana-0",
        "uuid": "5b2de169-2785-441b-ae8c-186a1936b17d",
        "version": {
            "number": "8.12.0",
            "build_hash": "abc123",
            "build_number": 70000,
            "build_snapshot": False,
            "build_flavor": "traditional"
        },
        "status": {
            "overall": {"level": "available", "summary": "All services are available"},
            "core": {
                "elasticsearch": {"level": "available", "summary": "Elasticsearch is available"},
                "savedObjects": {"level": "degraded", "summary": "SO migrations running"}
            },
            "plugins": {
                "alerting": {"level": "available", "summary": "All good"}
            }
        },
        "metrics": {
            "last_updated": "2024-01-01T00:00:00.000Z",
            "collected_at": "2024-01-01T00:00:00.000Z",
            "collection_interval_in_millis": 5000,
            "concurrent_connections": 7,
            "process": {
                "memory": {
                    "heap": {
                        "total_in_bytes": 300000000,
                        "used_in_bytes": 200000000,
                        "size_limit": 4000000000
                    },
                    "resident_set_size_in_bytes": 500000000
                },
                "event_loop_delay": 250.0,
                "pid": 1,
                "uptime_in_millis": 3600000
            },
            "os": {
                "platform": "linux",
                "cpu": {"cgroup": {"cpu_percent": 12.5}},
                "load": {"1m": 0.5, "5m": 0.75, "15m": 1.25},
                "memory": {
                    "total_in_bytes": 16000000000,
                    "free_in_bytes": 6000000000,
                    "used_in_bytes": 10000000000
                }
            },
            "requests": {
                "total": 1200,
                "disconnects": 3,
                "status_codes": {"200": 1100, "404": 100}
            },
            "response_times": {
                "avg_in_millis": 40,
                "max_in_millis": 1500
            }
        }
    }


def _json_handler(payload, status_code: int = 200):
    """MockTransport handler answering every request with ``payload`` as JSON."""
    body = json.dumps(payload).encode("utf-8")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body, headers={"Content-Type": "application/json"})

    return handler


@pytest.fixture
def make_client(kibana_config, logger):
    """Factory building a StatusClient whose requests are answered by a handler."""
    clients = []

    def factory(handler, config: KibanaConfig = None) -> StatusClient:
        client = StatusClient(config or kibana_config, logger, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def json_handler():
    """Factory for MockTransport handlers serving a fixed JSON payload."""
    return _json_handler
