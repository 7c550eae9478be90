"""
Shared Middleware
"""
from roombridge.shared.middleware.correlation import CorrelationIdMiddleware

__all__ = ["CorrelationIdMiddleware"]
