"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for outcomes the caller branches on (duplicate, skipped)
    - Exceptions: Use for failures that map to an HTTP error

Usage:
    from core.services import BaseService, ServiceResult

    class LedgerService(BaseService):
        @classmethod
        def record(cls, record) -> ServiceResult[Payment]:
            with cls.atomic():
                payment = Payment.objects.create(...)

            cls.get_logger().info(f"Recorded payment {payment.id}")
            return ServiceResult.success(payment)

Related:
    - core.exceptions: For failures that carry an HTTP status
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Used where the caller branches on the outcome (created vs. replayed)
    rather than on an exception.

    Attributes:
        success: Whether the operation succeeded
        data: Result data

    Usage:
        result = handle_payment_notification(data)
        if result.data.created:
            ...
    """

    success: bool
    data: T | None = None

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        return cls(success=True, data=data)

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Collaborators with state (clock, secrets) are passed in explicitly
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Nested use creates a savepoint, so an IntegrityError inside the
        block rolls back only the block and leaves the outer transaction
        usable.

        Example:
            try:
                with cls.atomic():
                    Payment.objects.create(...)
            except IntegrityError:
                # A concurrent writer won; the outer transaction is intact
                ...
        """
        with transaction.atomic():
            yield
