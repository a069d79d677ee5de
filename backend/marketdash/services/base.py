"""
Service Contract and Error Taxonomy

Every analytics service is a BaseService[InputT, OutputT]. Degenerate data
(short histories, gaps, zero denominators) never raises; only upstream
and request problems surface as ServiceError subclasses.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for the analytics services.

    Subclasses name themselves for logging, run their main computation
    through execute() and report readiness through health_check().
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name used in logs and error messages."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service's primary operation.

        Raises:
            ServiceError: the request is invalid or an upstream failed
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass


class ServiceError(Exception):
    """Raised by a service (or data source) it names."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ValidationError(ServiceError):
    """The request itself cannot be served (HTTP 400)."""
    pass


class ExternalAPIError(ServiceError):
    """An upstream data source failed or returned nothing usable (HTTP 502)."""
    pass


class RateLimitError(ServiceError):
    """An upstream data source throttled the request (HTTP 429)."""
    pass


class PaginationLimitError(ExternalAPIError):
    """Cursor pagination exceeded its page or time budget."""
    pass
