"""Pydantic configuration models for the exporter."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Tuple


RESERVED_PATHS = ("/", "/health", "/ready")


class KibanaConfig(BaseModel):
    """Upstream Kibana endpoint configuration."""
    url: str = "http://localhost:5601"
    username: Optional[str] = None
    password: Optional[str] = None
    timeout_seconds: float = Field(default=10.0, gt=0)
    insecure_skip_verify: bool = False

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')


class ServerConfig(BaseModel):
    """HTTP listener configuration."""
    listen_address: str = ":9684"
    metrics_path: str = "/metrics"

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Require host:port with a numeric port; the host may be empty."""
        host, sep, port = v.rpartition(':')
        if not sep or not port.isdigit() or not 0 <= int(port) <= 65535:
            raise ValueError('listen address must look like host:port or :port')
        return v

    @field_validator('metrics_path')
    @classmethod
    def validate_metrics_path(cls, v: str) -> str:
        """Metrics path must be absolute and not shadow the built-in routes."""
        if not v.startswith('/'):
            raise ValueError('metrics path must start with /')
        if v in RESERVED_PATHS:
            raise ValueError(f'metrics path cannot be one of {", ".join(RESERVED_PATHS)}')
        return v

    @property
    def host_port(self) -> Tuple[str, int]:
        """Split listen_address into a bindable (host, port) pair."""
        host, _, port = self.listen_address.rpartition(':')
        return host.strip('[]'), int(port)


class LoggingConfig(BaseModel):
    """Process logging configuration."""
    level: str = "info"
    format: str = "text"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept the usual level names, case-insensitively."""
        v = v.lower()
        if v not in ('debug', 'info', 'warn', 'warning', 'error'):
            raise ValueError('log level must be one of debug, info, warn, error')
        return v

    @field_validator('format')
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Only text and json output are supported."""
        v = v.lower()
        if v not in ('text', 'json'):
            raise ValueError('log format must be text or json')
        return v


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter."""
    kibana: KibanaConfig = Field(default_factory=KibanaConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
