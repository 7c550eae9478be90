"""
Workspace Settings Models
"""

from .workspace_settings import WorkspaceSettings

__all__ = ["WorkspaceSettings"]
