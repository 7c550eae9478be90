"""
Users Repositories
"""

from .user_repository import UserRepository

__all__ = ["UserRepository"]
