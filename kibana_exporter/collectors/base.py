"""Base collector abstract class."""

from abc import ABC, abstractmethod
from typing import List, Any, Optional
import logging
from functools import wraps

from ..services.status_client import StatusClientError
from ..utils.metrics import MetricDescriptor, Sample


class BaseCollector(ABC):
    """Abstract base class for collectors driven by the exposition server."""

    def __init__(self, client: Any, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            client: Upstream client used to fetch data
            logger: Logger instance
        """
        self.client = client
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    def describe(self) -> List[MetricDescriptor]:
        """
        Return the static descriptor catalog.

        Returns:
            List[MetricDescriptor]: Every descriptor this collector can emit
        """
        pass

    @abstractmethod
    def collect(self) -> List[Sample]:
        """
        Run one collection pass.

        Returns:
            List[Sample]: Samples for this pass

        Note:
            Implementations must not raise; upstream failures are reported
            as samples (see safe_scrape).
        """
        pass


def safe_scrape(func):
    """
    Decorator turning a failed upstream fetch into a None result.

    Client errors are logged at ERROR with the error kind; anything else is
    logged with a traceback. The wrapped call never raises.

    Args:
        func: Collector method performing the fetch

    Returns:
        Wrapped function returning the fetched value or None on failure
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs) -> Optional[Any]:
        try:
            return func(self, *args, **kwargs)
        except StatusClientError as e:
            self.logger.error(
                f"Failed to scrape Kibana: {e}",
                extra={"error_kind": e.__class__.__name__}
            )
        except Exception as e:
            self.logger.error(f"Scrape failed unexpectedly: {e}", exc_info=True)
        return None
    return wrapper
