"""Environment settings."""

import os
from typing import Any, Dict, Optional


class Settings:
    """Application settings from environment variables."""

    # Environment variable -> (config section, field)
    ENV_OVERRIDES = {
        "KIBANA_URL": ("kibana", "url"),
        "KIBANA_USERNAME": ("kibana", "username"),
        "KIBANA_PASSWORD": ("kibana", "password"),
    }

    @staticmethod
    def get(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set
            required: Whether the variable is required

        Returns:
            str: Environment variable value

        Raises:
            ValueError: If required variable is not set
        """
        value = os.getenv(key, default)
        if required and not value:
            raise ValueError(f"Required environment variable not set: {key}")
        return value or ""

    @classmethod
    def overrides(cls) -> Dict[str, Dict[str, Any]]:
        """
        Collect config overrides from the environment.

        Unset or empty variables are ignored.

        Returns:
            Dict: Nested overrides keyed by config section
        """
        result: Dict[str, Dict[str, Any]] = {}
        for env_var, (section, key) in cls.ENV_OVERRIDES.items():
            value = cls.get(env_var)
            if value:
                result.setdefault(section, {})[key] = value
        return result
