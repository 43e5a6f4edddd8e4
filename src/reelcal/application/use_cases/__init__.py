"""Application use cases - pipeline orchestration."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

# Type variables for generic use case pattern
TRequest = TypeVar("TRequest")
TResponse = TypeVar("TResponse")


class UseCase(ABC, Generic[TRequest, TResponse]):
    """Base class for all use cases following command pattern."""

    @abstractmethod
    async def execute(self, request: TRequest) -> TResponse:
        """Execute the use case with the given request."""


# Import concrete use cases (after UseCase definition to avoid circular imports)
from reelcal.application.use_cases.build_calendar import (  # noqa: E402
    BuildCalendarRequest,
    BuildCalendarResponse,
    BuildCalendarUseCase,
)
from reelcal.application.use_cases.build_history import (  # noqa: E402
    BuildHistoryRequest,
    BuildHistoryResponse,
    BuildHistoryUseCase,
)

__all__ = [
    "UseCase",
    "BuildCalendarRequest",
    "BuildCalendarResponse",
    "BuildCalendarUseCase",
    "BuildHistoryRequest",
    "BuildHistoryResponse",
    "BuildHistoryUseCase",
]
