"""
Users Module

Phone-keyed users and their (single) active socket binding.
"""

from .models.user import User

__all__ = ["User"]
