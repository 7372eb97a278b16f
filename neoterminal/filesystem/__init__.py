"""
NEOTERMINAL Virtual File System Module

Provides the in-memory file system of a session:
- Hierarchical directory tree
- Display-only permissions and ownership
- Path resolution
- Change notifications
"""

from .nodes import (
    NodeType,
    Permission,
    FilePermissions,
    VirtualNode,
    VirtualDirectory,
    VirtualFile,
)
from .path_resolver import PathResolver, ParsedPath
from .vfs import VirtualFileSystem, FileSystemEvent

__all__ = [
    # Nodes
    'NodeType',
    'Permission',
    'FilePermissions',
    'VirtualNode',
    'VirtualDirectory',
    'VirtualFile',
    # Path Resolver
    'PathResolver',
    'ParsedPath',
    # VFS
    'VirtualFileSystem',
    'FileSystemEvent',
]
