"""
Middleware package for the Real Estate Listings API.
"""

from .validation import ValidationMiddleware

__all__ = [
    "ValidationMiddleware"
]
