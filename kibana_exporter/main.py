"""Main application entry point for the Kibana Prometheus Exporter."""

import argparse
import signal
import sys
from typing import Any, Dict, Optional

from .collectors.kibana_collector import KibanaCollector
from .config.loader import ConfigLoader
from .config.models import ExporterConfig
from .server import ExporterServer
from .services.status_client import StatusClient
from .utils.logger import setup_logger


__version__ = "0.1.0"


class ExporterApp:
    """
    Main exporter application.

    Wires configuration, logging, the Kibana collector and the HTTP server,
    and handles graceful shutdown.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None
    ):
        """
        Initialize exporter application.

        Args:
            config_path: Optional path to YAML configuration file
            overrides: Nested config overrides from the command line
        """
        self.config_path = config_path
        self.logger = setup_logger("kibana_exporter")

        # Load configuration, then reconfigure logging from it
        self.config = self._load_config(overrides)
        self.logger = setup_logger(
            "kibana_exporter",
            level=self.config.logging.level,
            fmt=self.config.logging.format
        )

        # Setup signal handlers for graceful shutdown
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        self.logger.info(
            "Starting Kibana Prometheus Exporter",
            extra={"version": __version__}
        )
        self.logger.info(
            "Configured Kibana endpoint",
            extra={"kibana_url": self.config.kibana.url}
        )

        client = StatusClient(self.config.kibana, self.logger.getChild("StatusClient"))
        self.collector = KibanaCollector(client, self.logger)
        self.server = ExporterServer(self.collector, self.config.server, self.logger, version=__version__)

    def _load_config(self, overrides: Optional[Dict[str, Dict[str, Any]]]) -> ExporterConfig:
        """
        Load and validate configuration.

        Returns:
            ExporterConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is invalid
        """
        try:
            if self.config_path:
                self.logger.info(f"Loading configuration from {self.config_path}")
            return ConfigLoader.load(self.config_path, overrides)

        except FileNotFoundError:
            self.logger.error(f"Configuration file not found: {self.config_path}")
            sys.exit(1)

        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}", exc_info=True)
            sys.exit(1)

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        sys.exit(0)

    def run(self) -> None:
        """
        Serve until interrupted.

        Raises:
            SystemExit: If the listen address cannot be bound
        """
        try:
            self.server.serve_forever()
        except OSError as e:
            self.logger.error(
                "Failed to start HTTP server",
                extra={"address": self.config.server.listen_address, "error_message": str(e)}
            )
            sys.exit(1)
        finally:
            self.server.close()
            self.collector.close()
            self.logger.info("Exporter stopped")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser; unset options leave config values alone."""
    parser = argparse.ArgumentParser(
        prog='kibana-exporter',
        description='Prometheus exporter for the Kibana status API',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables KIBANA_URL, KIBANA_USERNAME and KIBANA_PASSWORD
override the corresponding options.

Examples:
  kibana-exporter --kibana-url https://kibana.internal:5601 --insecure-skip-verify
  kibana-exporter --config /etc/kibana-exporter/config.yaml --log-format json
        """
    )

    parser.add_argument('--config', help='Path to YAML configuration file')
    parser.add_argument('--listen-address', help='Address to listen on for metrics (default: :9684)')
    parser.add_argument('--metrics-path', help='Path under which to expose metrics (default: /metrics)')
    parser.add_argument('--kibana-url', help='Kibana URL to scrape (default: http://localhost:5601)')
    parser.add_argument('--kibana-username', help='Username for Kibana basic auth')
    parser.add_argument('--kibana-password', help='Password for Kibana basic auth')
    parser.add_argument('--timeout', type=float, help='Timeout in seconds for Kibana API requests (default: 10)')
    parser.add_argument(
        '--insecure-skip-verify',
        action='store_true',
        default=None,
        help='Skip TLS certificate verification'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        help='Log level (default: info)'
    )
    parser.add_argument('--log-format', choices=['text', 'json'], help='Log format (default: text)')
    parser.add_argument('--version', action='store_true', help='Show version information')
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """
    Map parsed arguments onto config sections.

    Args:
        args: Parsed command-line arguments

    Returns:
        Dict: Nested overrides; options not given on the command line are None
    """
    return {
        "kibana": {
            "url": args.kibana_url,
            "username": args.kibana_username,
            "password": args.kibana_password,
            "timeout_seconds": args.timeout,
            "insecure_skip_verify": args.insecure_skip_verify,
        },
        "server": {
            "listen_address": args.listen_address,
            "metrics_path": args.metrics_path,
        },
        "logging": {
            "level": args.log_level,
            "format": args.log_format,
        },
    }


def main(argv=None):
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"kibana-exporter {__version__}")
        sys.exit(0)

    app = ExporterApp(config_path=args.config, overrides=overrides_from_args(args))
    app.run()


if __name__ == '__main__':
    main()
