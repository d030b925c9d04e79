"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code that provides a foundation
for the domain apps:

- Generic, reusable base classes (no domain-specific logic)
- Clear extension points for domain apps
- Infrastructure concerns separated from business logic

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - MetadataMixin: Flexible JSON metadata storage

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError, AuthError, PermissionDeniedError
    - ConflictError, ConfigurationError, TransientInfraError
    - ExternalServiceError, InternalError

Clock (import from core.clock):
    - Clock: Protocol for "current time" providers
    - SystemClock, FixedClock

Responses (import from core.responses):
    - error_response: Convert an application error into a DRF Response

Note:
    - Business logic should NOT go here. Extend core classes in your domain apps.
    - Django models and model mixins are NOT imported here to avoid
      AppRegistryNotReady errors. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django dependencies)
from .exceptions import (
    AuthError,
    BaseApplicationError,
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    InternalError,
    PermissionDeniedError,
    TransientInfraError,
    ValidationError,
)

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "AuthError",
    "BaseApplicationError",
    "ConfigurationError",
    "ConflictError",
    "ExternalServiceError",
    "InternalError",
    "PermissionDeniedError",
    "TransientInfraError",
    "ValidationError",
]
