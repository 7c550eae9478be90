"""
Users Services
"""
from roombridge.modules.users.services.user_directory import UserDirectory

__all__ = ["UserDirectory"]
