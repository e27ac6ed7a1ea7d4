"""
Services.

Business logic layer.
"""

from app.services.base_service import (
    BaseService,
    ServiceResult,
    log_operation,
    service_envelope,
)


__all__ = [
    "BaseService",
    "ServiceResult",
    "log_operation",
    "service_envelope",
]
