# backend/roombook/services/base.py
"""
Base Service Pattern for the Roombook platform

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Error handling
- Performance monitoring
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Attributes logging.LogRecord sets itself; passing them in `extra` raises KeyError
_RESERVED_LOG_KEYS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Logging
    - Transaction handling
    - Performance monitoring
    """

    # Class-level metrics storage
    _class_metrics: Dict[str, Dict[str, Dict[str, float]]] = {}

    def __init__(self, db: Session):
        """
        Initialize base service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                self.db.add(entity)
                # commit is handled automatically

        Domain exceptions raised inside the block roll back and propagate
        unchanged; raw SQLAlchemy errors become ServiceException.
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_reservation")
            def create_reservation(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            if asyncio.iscoroutinefunction(func):

                @wraps(func)
                async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    start_time = time.time()
                    error_type = None
                    try:
                        return await func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _finish_measure(self, operation_name, time.time() - start_time, error_type)

                return cast(F, async_wrapper)

            @wraps(func)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                error_type = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _finish_measure(self, operation_name, time.time() - start_time, error_type)

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Args:
            operation: Operation name
            **context: Additional context to log. Keys that clash with
                LogRecord attributes are logged with a `ctx_` prefix.
        """
        extra = {
            (f"ctx_{key}" if key in _RESERVED_LOG_KEYS else key): value for key, value in context.items()
        }
        extra["operation"] = operation
        self.logger.info(f"Operation: {operation}", extra=extra)

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        class_name = self.__class__.__name__
        metrics = BaseService._class_metrics.setdefault(class_name, {})
        metric_data = metrics.setdefault(
            operation,
            {
                "count": 0,
                "total_time": 0.0,
                "success_count": 0,
                "failure_count": 0,
                "min_time": float("inf"),
                "max_time": 0.0,
            },
        )
        metric_data["count"] += 1
        metric_data["total_time"] += elapsed
        metric_data["min_time"] = min(metric_data["min_time"], elapsed)
        metric_data["max_time"] = max(metric_data["max_time"], elapsed)
        if success:
            metric_data["success_count"] += 1
        else:
            metric_data["failure_count"] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get performance metrics for this service.

        Returns:
            Dictionary with metrics for each measured operation
        """
        result: Dict[str, Any] = {}
        for operation, data in BaseService._class_metrics.get(self.__class__.__name__, {}).items():
            count = data["count"]
            if count == 0:
                continue
            result[operation] = {
                "count": count,
                "avg_time": data["total_time"] / count,
                "min_time": data["min_time"],
                "max_time": data["max_time"],
                "success_rate": data["success_count"] / count,
            }
        return result


def _finish_measure(service: Any, operation_name: str, elapsed: float, error_type: Any) -> None:
    success = error_type is None
    if hasattr(service, "_record_metric"):
        service._record_metric(operation_name, elapsed, success)

    # Only log if it's actually slow
    if elapsed > 1.0 and hasattr(service, "logger"):
        service.logger.warning(f"Slow operation detected: {operation_name} took {elapsed:.2f}s")

    prometheus_metrics.record_service_operation(
        service=service.__class__.__name__,
        operation=operation_name,
        duration=elapsed,
        status="success" if success else "error",
        error_type=error_type,
    )
