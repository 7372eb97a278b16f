"""
Path Resolver Module

Handles path resolution and manipulation in the virtual file system.
All functions are pure string arithmetic; none of them touch the tree.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass
class ParsedPath:
    """A parsed path with its components."""
    is_absolute: bool
    components: List[str]

    def __str__(self) -> str:
        if self.is_absolute:
            return '/' + '/'.join(self.components)
        return '/'.join(self.components) if self.components else '.'


class PathResolver:
    """
    Resolves and manipulates filesystem paths.

    Handles:
    - Absolute and relative paths
    - . and .. components (.. at the root stays at the root)
    - Path normalization

    Example:
        >>> PathResolver.resolve('../docs', '/home/user')
        '/home/docs'
    """

    @staticmethod
    def parse(path: str) -> ParsedPath:
        """
        Parse a path into components.

        Empty and ``.`` components are dropped; ``..`` is kept for
        ``normalize`` to apply.
        """
        is_absolute = path.startswith('/')
        components = [c for c in path.split('/') if c and c != '.']
        return ParsedPath(is_absolute=is_absolute, components=components)

    @staticmethod
    def normalize(path: str) -> str:
        """
        Normalize a path by resolving . and ..

        Args:
            path: Path to normalize

        Returns:
            Normalized path string
        """
        parsed = PathResolver.parse(path)

        result: List[str] = []

        for component in parsed.components:
            if component == '..':
                if result:
                    result.pop()
            else:
                result.append(component)

        if parsed.is_absolute:
            return '/' + '/'.join(result)
        return '/'.join(result) if result else '.'

    @staticmethod
    def join(*paths: str) -> str:
        """
        Join multiple path components.

        A later absolute component replaces everything before it.
        """
        if not paths:
            return '.'

        result = paths[0]

        for path in paths[1:]:
            if path.startswith('/'):
                result = path
            else:
                result = result.rstrip('/') + '/' + path

        return PathResolver.normalize(result)

    @staticmethod
    def resolve(path: str, cwd: str = '/') -> str:
        """
        Resolve a path relative to a current working directory.

        Args:
            path: Path to resolve
            cwd: Absolute current working directory

        Returns:
            Absolute, normalized path (``/`` for the root)
        """
        if PathResolver.is_absolute(path):
            return PathResolver.normalize(path)

        combined = cwd.rstrip('/') + '/' + path
        return PathResolver.normalize('/' + combined.lstrip('/'))

    @staticmethod
    def components(path: str) -> List[str]:
        """Segments of an already-normalized absolute path."""
        return [c for c in path.split('/') if c]

    @staticmethod
    def dirname(path: str) -> str:
        """Directory portion of a path (``/`` for top-level entries)."""
        normalized = PathResolver.normalize(path)

        if '/' not in normalized:
            return '.'

        if normalized == '/':
            return '/'

        return normalized.rsplit('/', 1)[0] or '/'

    @staticmethod
    def basename(path: str) -> str:
        """Final component of a path (empty for the root)."""
        normalized = PathResolver.normalize(path)

        if normalized == '/':
            return ''

        if '/' not in normalized:
            return normalized

        return normalized.rsplit('/', 1)[1]

    @staticmethod
    def split(path: str) -> Tuple[str, str]:
        """
        Split a path into directory and base name.

        Returns:
            Tuple of (dirname, basename)
        """
        return (PathResolver.dirname(path), PathResolver.basename(path))

    @staticmethod
    def is_absolute(path: str) -> bool:
        """Check if a path is absolute."""
        return path.startswith('/')

    @staticmethod
    def is_ancestor(ancestor: str, path: str) -> bool:
        """
        True if ``path`` equals ``ancestor`` or lies beneath it.

        Both arguments must be normalized absolute paths.
        """
        if ancestor == '/':
            return True
        return path == ancestor or path.startswith(ancestor.rstrip('/') + '/')

    @staticmethod
    def get_depth(path: str) -> int:
        """Number of components in a path (0 for the root)."""
        normalized = PathResolver.normalize(path)
        if normalized == '/':
            return 0
        return len([c for c in normalized.split('/') if c])
