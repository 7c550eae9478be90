"""
Workspace Settings Module
"""

from .models.workspace_settings import WorkspaceSettings

__all__ = ["WorkspaceSettings"]
