"""Kibana status level enumeration."""

from enum import Enum
from typing import Optional


class StatusLevel(Enum):
    """Overall Kibana status level, covering both the 7.x and 8.x vocabularies."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    UNKNOWN = "unknown"

    @classmethod
    def from_level(cls, level: Optional[str]) -> "StatusLevel":
        """
        Map a raw level string from /api/status to a status level.

        Args:
            level: Level as reported by Kibana (e.g. "available", "green")

        Returns:
            StatusLevel: Matching level, UNKNOWN for anything unrecognised
        """
        return _LEVEL_ALIASES.get(level, cls.UNKNOWN)

    def to_gauge(self) -> float:
        """
        Convert status to its gauge value.

        Returns:
            float: 1.0 green, 0.5 yellow, 0.0 red, -1.0 unknown
        """
        return {
            StatusLevel.GREEN: 1.0,
            StatusLevel.YELLOW: 0.5,
            StatusLevel.RED: 0.0,
            StatusLevel.UNKNOWN: -1.0
        }[self]


_LEVEL_ALIASES = {
    "available": StatusLevel.GREEN,
    "green": StatusLevel.GREEN,
    "degraded": StatusLevel.YELLOW,
    "yellow": StatusLevel.YELLOW,
    "unavailable": StatusLevel.RED,
    "red": StatusLevel.RED,
}


def availability(level: Optional[str]) -> float:
    """Return 1.0 when a subsystem reports "available", 0.0 otherwise."""
    return 1.0 if level == "available" else 0.0
