"""
Contacts Module

Named contacts for phones; creating or editing one rewrites the rooms and
messages that reference its phone.
"""

from .models.contact import Contact

__all__ = ["Contact"]
