"""
Base Service Interface

Pipeline services inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for pipeline services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Has a name used in logs and errors
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main function.

        Args:
            input_data: Input conforming to InputT

        Returns:
            Output conforming to OutputT

        Raises:
            ServiceError: If execution fails
        """
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ExternalAPIError(ServiceError):
    """External API call failed."""
    pass


class RateLimitError(ExternalAPIError):
    """Rate limit exceeded."""
    pass


class NoMarketDataError(ServiceError):
    """No usable quote was fetched for the whole universe."""
    pass


class ReportGenerationError(ServiceError):
    """Text generation failed after all attempts."""
    pass


class DeliveryError(ServiceError):
    """Message channel rejected or failed a send."""
    pass


class MarkupRejectedError(DeliveryError):
    """Message channel could not parse the markup in a segment."""
    pass


class RunInProgressError(ServiceError):
    """A report run is already executing."""
    pass
