"""
Virtual Node Module

Implements the entities of the in-memory filesystem tree: files,
directories and their UNIX-style permission bits.

The tree is owned top-down: a directory's ``children`` map is the only
ownership edge, ``parent`` is a back-reference kept consistent by
``add_child`` and ``remove_child``.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Optional, Any, List, Union

from neoterminal.exceptions import InvalidPermissionError


class NodeType(str, Enum):
    """Kinds of filesystem nodes."""
    FILE = 'file'
    DIRECTORY = 'directory'


class Permission(IntFlag):
    """One rwx triplet."""
    NONE = 0
    EXECUTE = 1
    WRITE = 2
    WRITE_EXEC = WRITE | EXECUTE
    READ = 4
    READ_EXEC = READ | EXECUTE
    READ_WRITE = READ | WRITE
    ALL = READ | WRITE | EXECUTE


def _triplet_to_string(perm: Permission) -> str:
    return (
        ('r' if perm & Permission.READ else '-') +
        ('w' if perm & Permission.WRITE else '-') +
        ('x' if perm & Permission.EXECUTE else '-')
    )


def _string_to_triplet(triplet: str, source: str) -> Permission:
    result = Permission.NONE
    for char, flag, letter in zip(
        triplet,
        (Permission.READ, Permission.WRITE, Permission.EXECUTE),
        'rwx'
    ):
        if char == letter:
            result |= flag
        elif char != '-':
            raise InvalidPermissionError(source)
    return result


@dataclass
class FilePermissions:
    """
    User/group/other permission triplets.

    Serializes to the familiar 9-character form (``rwxr-xr-x``) and parses
    back without loss. Permissions are stored and displayed only; nothing
    in the filesystem checks them against an acting user.

    Example:
        >>> perms = FilePermissions(Permission.ALL, Permission.READ_EXEC, Permission.READ_EXEC)
        >>> str(perms)
        'rwxr-xr-x'
        >>> FilePermissions.from_string('rw-r--r--').to_octal()
        420
    """

    user: Permission = Permission.READ_WRITE
    group: Permission = Permission.READ
    other: Permission = Permission.READ

    def __post_init__(self):
        for field_name in ('user', 'group', 'other'):
            value = int(getattr(self, field_name))
            if not 0 <= value <= 7:
                raise InvalidPermissionError(str(value))
            setattr(self, field_name, Permission(value))

    def to_string(self) -> str:
        """Render as a 9-character rwx string."""
        return (
            _triplet_to_string(self.user) +
            _triplet_to_string(self.group) +
            _triplet_to_string(self.other)
        )

    def __str__(self) -> str:
        return self.to_string()

    @classmethod
    def from_string(cls, perm_str: str) -> 'FilePermissions':
        """
        Parse a 9-character rwx string.

        Raises:
            InvalidPermissionError: If the string is malformed
        """
        if len(perm_str) != 9:
            raise InvalidPermissionError(perm_str)

        return cls(
            user=_string_to_triplet(perm_str[0:3], perm_str),
            group=_string_to_triplet(perm_str[3:6], perm_str),
            other=_string_to_triplet(perm_str[6:9], perm_str),
        )

    def to_octal(self) -> int:
        """Return the numeric mode, e.g. ``0o755``."""
        return (int(self.user) << 6) | (int(self.group) << 3) | int(self.other)

    @classmethod
    def from_octal(cls, mode: Union[int, str]) -> 'FilePermissions':
        """
        Build permissions from a numeric mode (``0o644``) or an octal
        string (``"644"``).
        """
        if isinstance(mode, str):
            if not mode or len(mode) > 4 or any(c not in '01234567' for c in mode):
                raise InvalidPermissionError(mode)
            mode = int(mode, 8)

        if not 0 <= mode <= 0o777:
            raise InvalidPermissionError(oct(mode))

        return cls(
            user=Permission((mode >> 6) & 0o7),
            group=Permission((mode >> 3) & 0o7),
            other=Permission(mode & 0o7),
        )

    def clone(self) -> 'FilePermissions':
        return FilePermissions(self.user, self.group, self.other)


def _default_dir_permissions() -> FilePermissions:
    return FilePermissions(Permission.ALL, Permission.READ_EXEC, Permission.READ_EXEC)


def _default_file_permissions() -> FilePermissions:
    return FilePermissions(Permission.READ_WRITE, Permission.READ, Permission.READ)


class VirtualNode(ABC):
    """
    Base class for all filesystem entities.

    Stores the metadata common to files and directories:
    - Name (unique among siblings) and parent back-reference
    - Permissions, owner and group
    - Created/modified/accessed timestamps (epoch seconds)
    """

    def __init__(
        self,
        name: str,
        parent: Optional['VirtualDirectory'] = None,
        owner: str = 'user',
        group: str = 'user'
    ):
        self.name = name
        self.parent = parent
        self.permissions = self._default_permissions()
        now = time.time()
        self.created = now
        self.modified = now
        self.accessed = now
        self.owner = owner
        self.group = group

    @staticmethod
    @abstractmethod
    def _default_permissions() -> FilePermissions:
        ...

    @abstractmethod
    def size(self) -> int:
        """Size in bytes."""

    @abstractmethod
    def type(self) -> NodeType:
        """Node kind."""

    @abstractmethod
    def clone(self) -> 'VirtualNode':
        """Deep copy, detached from any parent."""

    @property
    def is_directory(self) -> bool:
        return self.type() == NodeType.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.type() == NodeType.FILE

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def path(self) -> str:
        """Absolute path, computed by walking parent references."""
        parts: List[str] = []
        node: Optional[VirtualNode] = self
        while node is not None and node.parent is not None:
            parts.append(node.name)
            node = node.parent
        return '/' + '/'.join(reversed(parts))

    def chmod(self, permissions: FilePermissions) -> None:
        """Replace the permission bits."""
        self.permissions = permissions.clone()
        self.modified = time.time()

    def chown(self, owner: str, group: Optional[str] = None) -> None:
        """Change owner and, optionally, group."""
        self.owner = owner
        if group is not None:
            self.group = group
        self.modified = time.time()

    def touch(self) -> None:
        """Update access and modification times."""
        now = time.time()
        self.accessed = now
        self.modified = now

    def _copy_metadata(self, target: 'VirtualNode') -> None:
        target.permissions = self.permissions.clone()
        target.created = self.created
        target.modified = self.modified
        target.accessed = self.accessed
        target.owner = self.owner
        target.group = self.group

    def to_dict(self) -> dict[str, Any]:
        """Convert node to dictionary for display."""
        return {
            'name': self.name,
            'type': self.type().value,
            'permissions': self.permissions.to_string(),
            'owner': self.owner,
            'group': self.group,
            'size': self.size(),
            'modified': time.strftime('%Y-%m-%d %H:%M', time.localtime(self.modified)),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, path={self.path!r})"


class VirtualDirectory(VirtualNode):
    """
    A directory: a node holding a name -> child mapping.

    Iteration order of ``children`` is insertion order, which keeps
    listings stable between calls.
    """

    def __init__(
        self,
        name: str,
        parent: Optional['VirtualDirectory'] = None,
        owner: str = 'user',
        group: str = 'user'
    ):
        super().__init__(name, parent, owner, group)
        self.children: dict[str, VirtualNode] = {}

    @staticmethod
    def _default_permissions() -> FilePermissions:
        return _default_dir_permissions()

    def add_child(self, node: VirtualNode) -> None:
        """
        Link ``node`` under this directory.

        A node still linked elsewhere is unlinked from its old parent first,
        and a sibling with the same name is replaced.
        """
        old_parent = node.parent
        if old_parent is not None and old_parent is not self:
            if old_parent.children.get(node.name) is node:
                old_parent.remove_child(node.name)

        replaced = self.children.get(node.name)
        if replaced is not None and replaced is not node:
            replaced.parent = None

        self.children[node.name] = node
        node.parent = self
        self.modified = time.time()

    def remove_child(self, name: str) -> bool:
        """Unlink a child. Returns False if there was none."""
        node = self.children.pop(name, None)
        if node is None:
            return False
        node.parent = None
        self.modified = time.time()
        return True

    def get_child(self, name: str) -> Optional[VirtualNode]:
        self.accessed = time.time()
        return self.children.get(name)

    def has_child(self, name: str) -> bool:
        return name in self.children

    def list_children(self) -> List[VirtualNode]:
        self.accessed = time.time()
        return list(self.children.values())

    def size(self) -> int:
        total = 0
        stack: List[VirtualDirectory] = [self]
        while stack:
            directory = stack.pop()
            for child in directory.children.values():
                if isinstance(child, VirtualDirectory):
                    stack.append(child)
                else:
                    total += child.size()
        return total

    def type(self) -> NodeType:
        return NodeType.DIRECTORY

    def _shallow_copy(self) -> 'VirtualDirectory':
        copy = VirtualDirectory(self.name)
        self._copy_metadata(copy)
        return copy

    def clone(self) -> 'VirtualDirectory':
        """
        Deep-copy the subtree rooted here.

        Uses an explicit work stack so deep trees cannot exhaust the
        interpreter's recursion limit. The copy is detached (``parent`` is
        None); every descendant's ``parent`` points into the copy.
        """
        root_copy = self._shallow_copy()
        stack: List[tuple[VirtualDirectory, VirtualDirectory]] = [(self, root_copy)]

        while stack:
            source, target = stack.pop()
            for name, child in source.children.items():
                if isinstance(child, VirtualDirectory):
                    child_copy: VirtualNode = child._shallow_copy()
                    stack.append((child, child_copy))
                else:
                    child_copy = child.clone()
                child_copy.parent = target
                target.children[name] = child_copy

        return root_copy


class VirtualFile(VirtualNode):
    """A regular file holding a byte buffer."""

    def __init__(
        self,
        name: str,
        parent: Optional[VirtualDirectory] = None,
        content: Union[bytes, str] = b'',
        owner: str = 'user',
        group: str = 'user'
    ):
        super().__init__(name, parent, owner, group)
        self.content = _to_bytes(content)

    @staticmethod
    def _default_permissions() -> FilePermissions:
        return _default_file_permissions()

    def get_content(self) -> bytes:
        self.accessed = time.time()
        return self.content

    def set_content(self, content: Union[bytes, str]) -> None:
        self.content = _to_bytes(content)
        self.modified = time.time()

    def append_content(self, content: Union[bytes, str]) -> None:
        self.content = self.content + _to_bytes(content)
        self.modified = time.time()

    def size(self) -> int:
        return len(self.content)

    def type(self) -> NodeType:
        return NodeType.FILE

    def clone(self) -> 'VirtualFile':
        copy = VirtualFile(self.name, content=self.content)
        self._copy_metadata(copy)
        return copy


def _to_bytes(content: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(content, str):
        return content.encode('utf-8')
    return bytes(content)
