"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from .models import ExporterConfig
from .settings import Settings


class ConfigLoader:
    """Load and validate exporter configuration."""

    @staticmethod
    def load(
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None
    ) -> ExporterConfig:
        """
        Build configuration from file, command-line overrides and environment.

        Later sources win: file values, then ``overrides``, then the
        KIBANA_* environment variables.

        Args:
            config_path: Optional path to YAML configuration file
            overrides: Nested section -> field -> value mapping; None values are skipped

        Returns:
            ExporterConfig: Validated configuration object
        """
        raw_config = ConfigLoader._read_file(config_path) if config_path else {}

        for source in (overrides or {}, Settings.overrides()):
            for section, values in source.items():
                merged = dict(raw_config.get(section) or {})
                merged.update({k: v for k, v in values.items() if v is not None})
                raw_config[section] = merged

        return ExporterConfig(**raw_config)

    @staticmethod
    def _read_file(config_path: str) -> Dict[str, Any]:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        # Substitute environment variables
        return ConfigLoader._substitute_env_vars(raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
