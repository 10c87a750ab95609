"""
Custom exceptions for siteaudit.

Provides a hierarchy of exceptions for better error handling and debugging.
"""

from typing import Any, Dict, Optional


class SiteAuditError(Exception):
    """Base exception for all siteaudit errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SiteAuditError):
    """Raised when there are configuration issues."""

    pass


class ValidationError(SiteAuditError):
    """Input validation errors."""

    pass


class AnalysisError(SiteAuditError):
    """Raised when the keyword analysis pipeline fails at some stage."""

    def __init__(self, message: str, stage: str = "unknown", **kwargs):
        super().__init__(message, **kwargs)
        self.stage = stage


class ProviderError(SiteAuditError):
    """Base class for external data provider errors."""

    pass


class ProviderNotConfiguredError(ProviderError):
    """Provider is missing credentials or is disabled."""

    pass


class RateLimitError(ProviderError):
    """Rate limiting errors."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ExternalServiceError(ProviderError):
    """External service is unavailable or returning errors."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(f"{service}: {message}", **kwargs)
        self.service = service
        self.status_code = status_code
