"""
Canned Responses Models
"""

from .canned_response import CannedResponse

__all__ = ["CannedResponse"]
