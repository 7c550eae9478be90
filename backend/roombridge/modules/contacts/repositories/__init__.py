"""
Contacts Repositories
"""

from .contact_repository import ContactRepository

__all__ = ["ContactRepository"]
