"""
Base service class.

Provides common functionality for all service classes including session management,
logging, and helper decorators.
"""

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.utils.exceptions import InternalError, InvestmentClubError


# Type variable for generic decorator return types
T = TypeVar("T")

GENERIC_INTERNAL_ERROR = "Internal error, please try again later"


@dataclass
class ServiceResult:
    """
    Standard service result container.

    Used to return structured results from service methods. A successful
    result may still carry a warning when a secondary write failed.
    """
    success: bool
    data: Any = None
    error: str | None = None
    error_code: str | None = None
    warning: str | None = None

    @classmethod
    def ok(cls, data: Any = None, warning: str | None = None) -> "ServiceResult":
        """Build a successful result."""
        return cls(success=True, data=data, warning=warning)

    @classmethod
    def fail(cls, error: InvestmentClubError) -> "ServiceResult":
        """Build a failed result from a domain error."""
        return cls(success=False, error=error.message, error_code=error.error_code)

    def to_dict(self) -> dict[str, Any]:
        """Envelope representation for the transport layer."""
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        if self.error_code is not None:
            payload["error_code"] = self.error_code
        if self.warning is not None:
            payload["warning"] = self.warning
        return payload


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Transaction helpers
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """
        Commit current transaction.

        Raises:
            Exception: If commit fails
        """
        await self.session.commit()

    async def rollback(self) -> None:
        """
        Rollback current transaction.

        Raises:
            Exception: If rollback fails
        """
        await self.session.rollback()


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method entry/exit with timing.

    Logs:
    - Method entry with arguments
    - Method exit with duration
    - Exceptions if any

    Usage:
        @log_operation
        async def approve(self, actor_id: int, investment_id: int):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()

        self.logger.debug(
            "Starting {}",
            func.__name__,
            extra={
                "function": func.__name__,
                "args_count": len(args),
                "kwargs_keys": list(kwargs.keys()),
            },
        )

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            duration = time.time() - start_time
            self.logger.warning(
                "Failed {}: {}",
                func.__name__,
                e,
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(duration, 3),
                    "error": str(e),
                    "success": False,
                },
            )
            raise

        duration = time.time() - start_time
        self.logger.info(
            "Completed {}",
            func.__name__,
            extra={
                "function": func.__name__,
                "duration_seconds": round(duration, 3),
                "success": True,
            },
        )
        return result

    return wrapper


def service_envelope(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator converting a method result or error into a ServiceResult.

    Domain errors become failed results with their message and code; any
    other exception is logged with its traceback, the session is rolled
    back and a generic internal error is returned. A method may return a
    ServiceResult itself (for partial success) which is passed through.

    Usage:
        @service_envelope
        async def withdraw_investment(self, actor_id, investment_id):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method returning ServiceResult
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> ServiceResult:
        try:
            result = await func(self, *args, **kwargs)
        except InvestmentClubError as e:
            self.logger.info(
                "{} rejected: {}",
                func.__name__,
                e.error_code,
                extra={"function": func.__name__, "error": e.message},
            )
            if isinstance(e, InternalError):
                return ServiceResult(
                    success=False,
                    error=GENERIC_INTERNAL_ERROR,
                    error_code=e.error_code,
                )
            return ServiceResult.fail(e)
        except Exception as e:
            self.logger.exception(f"Unexpected error in {func.__name__}: {e}")
            try:
                await self.rollback()
            except Exception as rollback_error:
                self.logger.error(f"Rollback failed after error: {rollback_error}")
            return ServiceResult(
                success=False,
                error=GENERIC_INTERNAL_ERROR,
                error_code=InternalError.error_code,
            )

        if isinstance(result, ServiceResult):
            return result
        return ServiceResult.ok(result)

    return wrapper
