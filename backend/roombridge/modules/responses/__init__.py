"""
Canned Responses Module
"""

from .models.canned_response import CannedResponse

__all__ = ["CannedResponse"]
