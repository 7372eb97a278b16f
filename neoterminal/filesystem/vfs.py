"""
Virtual File System (VFS) Module

Implements the in-memory filesystem of a shell session:
- One rooted directory tree of VirtualDirectory/VirtualFile nodes
- A current-directory pointer
- Path-based create/read/update/delete operations
- Change notifications for observers (narrative triggers, UI)

All operations are synchronous and complete in a single in-memory update,
so a caller never sees a half-applied change.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from collections import defaultdict
from enum import Enum
from typing import Optional, Any, Callable, Iterator, List, Tuple, Union

from .nodes import VirtualNode, VirtualDirectory, VirtualFile, FilePermissions
from .path_resolver import PathResolver
from neoterminal.core.config_loader import FilesystemConfig
from neoterminal.exceptions import (
    FileNotFoundError,
    FileExistsError,
    NotAFileError,
    NotADirectoryError,
    InvalidPathError,
    RootOperationError,
)
from neoterminal.logger import get_logger


class FileSystemEvent(str, Enum):
    """Notifications emitted by the filesystem."""
    DIRECTORY_CHANGED = 'directory-changed'
    NODE_CREATED = 'node-created'
    NODE_MODIFIED = 'node-modified'
    NODE_DELETED = 'node-deleted'
    NODE_ACCESSED = 'node-accessed'


FileSystemObserver = Callable[[dict[str, Any]], None]


class VirtualFileSystem:
    """
    Virtual File System of one session.

    Owns exactly one root directory and a current-directory pointer that
    always references a directory reachable from the root.

    Example:
        >>> vfs = VirtualFileSystem()
        >>> vfs.write_file('notes/todo.txt', 'hack the planet')
        >>> vfs.read_file('/home/user/notes/todo.txt')
        b'hack the planet'
    """

    def __init__(
        self,
        config: Optional[FilesystemConfig] = None,
        initialize: bool = True
    ):
        self._config = config or FilesystemConfig()
        self._logger = get_logger('filesystem')
        self._root = VirtualDirectory(
            '/',
            owner=self._config.default_owner,
            group=self._config.default_group
        )
        self._current = self._root
        self._observers: dict[FileSystemEvent, List[FileSystemObserver]] = defaultdict(list)

        if initialize:
            self._initialize_layout()

    def _initialize_layout(self) -> None:
        """Create the starting directory structure and welcome file."""
        self._logger.info("Initializing virtual filesystem")

        home = self.mkdir(self._config.home_directory)

        for path in self._config.initial_directories:
            self.mkdir(path)

        if self._config.welcome_file:
            self.write_file(self._config.welcome_file, self._config.welcome_message)

        self._current = home
        self._logger.info(
            "Virtual filesystem initialized",
            context={'cwd': self.get_current_path()}
        )

    # Observers

    def subscribe(
        self,
        event: Union[FileSystemEvent, str],
        callback: FileSystemObserver
    ) -> None:
        """Register a callback for a filesystem event."""
        self._observers[FileSystemEvent(event)].append(callback)

    def unsubscribe(
        self,
        event: Union[FileSystemEvent, str],
        callback: FileSystemObserver
    ) -> bool:
        """Remove a previously registered callback."""
        callbacks = self._observers[FileSystemEvent(event)]
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def _emit(self, event: FileSystemEvent, **payload: Any) -> None:
        payload['event'] = event.value
        for callback in list(self._observers.get(event, ())):
            try:
                callback(payload)
            except Exception as e:
                self._logger.error(
                    f"Error in filesystem observer: {e}",
                    context={'event': event.value}
                )

    # Navigation

    @property
    def root(self) -> VirtualDirectory:
        return self._root

    def get_current_directory(self) -> VirtualDirectory:
        return self._current

    def get_current_path(self) -> str:
        return self._current.path

    def _set_current(self, directory: VirtualDirectory) -> None:
        previous = self.get_current_path()
        self._current = directory
        self._emit(
            FileSystemEvent.DIRECTORY_CHANGED,
            path=self.get_current_path(),
            previous=previous
        )

    def resolve_path(self, path: str) -> str:
        """
        Convert a path to its normalized absolute form.

        Relative paths are joined to the current directory; ``..`` at the
        root stays at the root.
        """
        return PathResolver.resolve(path, self.get_current_path())

    def get_node(self, path: str) -> Optional[VirtualNode]:
        """
        Look up the node at a path.

        Returns:
            The node, or None if any segment is missing or a file is used
            as an intermediate directory
        """
        resolved = self.resolve_path(path)
        current: VirtualNode = self._root

        for component in PathResolver.components(resolved):
            if not isinstance(current, VirtualDirectory):
                return None

            child = current.get_child(component)
            if child is None:
                return None

            current = child

        return current

    def exists(self, path: str) -> bool:
        """Check if a path exists."""
        return self.get_node(path) is not None

    def is_directory(self, path: str) -> bool:
        """Check if a path is a directory."""
        return isinstance(self.get_node(path), VirtualDirectory)

    def is_file(self, path: str) -> bool:
        """Check if a path is a regular file."""
        return isinstance(self.get_node(path), VirtualFile)

    def change_directory(self, path: str) -> None:
        """
        Change the current directory.

        Raises:
            FileNotFoundError: If the path does not exist
            NotADirectoryError: If the path is a file
        """
        node = self.get_node(path)

        if node is None:
            raise FileNotFoundError(path)

        if not isinstance(node, VirtualDirectory):
            raise NotADirectoryError(path)

        self._set_current(node)

    # Creation

    def _new_directory(self, name: str) -> VirtualDirectory:
        return VirtualDirectory(
            name,
            owner=self._config.default_owner,
            group=self._config.default_group
        )

    def _new_file(self, name: str) -> VirtualFile:
        return VirtualFile(
            name,
            owner=self._config.default_owner,
            group=self._config.default_group
        )

    def mkdir(self, path: str) -> VirtualDirectory:
        """
        Create a directory and any missing parents.

        Idempotent: an existing directory is returned unchanged.

        Raises:
            NotADirectoryError: If the path, or one of its parents, is a file
        """
        resolved = self.resolve_path(path)
        current = self._root
        walked = ''

        for component in PathResolver.components(resolved):
            walked = f"{walked}/{component}"
            child = current.children.get(component)

            if child is None:
                child = self._new_directory(component)
                current.add_child(child)
                self._logger.debug("Created directory", context={'path': walked})
                self._emit(FileSystemEvent.NODE_CREATED, path=walked, node=child)
            elif not isinstance(child, VirtualDirectory):
                raise NotADirectoryError(walked)

            current = child

        return current

    def _prepare_file(self, path: str) -> Tuple[str, VirtualFile, bool]:
        resolved = self.resolve_path(path)

        if resolved == '/':
            raise InvalidPathError(path, reason="missing file name")

        parent_path, name = PathResolver.split(resolved)
        parent = self.mkdir(parent_path)

        existing = parent.get_child(name)
        if existing is not None and not isinstance(existing, VirtualFile):
            raise NotAFileError(path, actual_type=existing.type().value)

        if existing is not None:
            return resolved, existing, False

        file = self._new_file(name)
        parent.add_child(file)
        self._logger.debug("Created file", context={'path': resolved})
        return resolved, file, True

    def write_file(self, path: str, content: Union[bytes, str]) -> VirtualFile:
        """
        Create or overwrite a file, creating missing parent directories.

        Raises:
            NotAFileError: If a directory exists at the path
            NotADirectoryError: If a parent component is a file
            InvalidPathError: If the path is the root
        """
        resolved, file, created = self._prepare_file(path)
        file.set_content(content)

        if created:
            self._emit(FileSystemEvent.NODE_CREATED, path=resolved, node=file)
        self._emit(FileSystemEvent.NODE_MODIFIED, path=resolved, node=file)

        return file

    def append_file(self, path: str, content: Union[bytes, str]) -> VirtualFile:
        """Append to a file, creating it (and its parents) if absent."""
        resolved, file, created = self._prepare_file(path)
        file.append_content(content)

        if created:
            self._emit(FileSystemEvent.NODE_CREATED, path=resolved, node=file)
        self._emit(FileSystemEvent.NODE_MODIFIED, path=resolved, node=file)

        return file

    # Reading

    def read_file(self, path: str) -> bytes:
        """
        Read a file's content.

        Raises:
            FileNotFoundError: If the path does not exist
            NotAFileError: If the path is a directory
        """
        node = self.get_node(path)

        if node is None:
            raise FileNotFoundError(path)

        if not isinstance(node, VirtualFile):
            raise NotAFileError(path, actual_type=node.type().value)

        content = node.get_content()
        self._emit(FileSystemEvent.NODE_ACCESSED, path=self.resolve_path(path), node=node)
        return content

    def list_directory(self, path: str = '.') -> List[VirtualNode]:
        """
        List a directory's children in stable (insertion) order.

        Raises:
            FileNotFoundError: If the path does not exist
            NotADirectoryError: If the path is a file
        """
        node = self.get_node(path)

        if node is None:
            raise FileNotFoundError(path)

        if not isinstance(node, VirtualDirectory):
            raise NotADirectoryError(path)

        return node.list_children()

    def walk(self, path: str = '/') -> Iterator[Tuple[str, VirtualNode]]:
        """
        Yield ``(absolute_path, node)`` pairs in pre-order.

        Uses an explicit stack, so depth is not limited by recursion.
        """
        start = self.get_node(path)
        if start is None:
            raise FileNotFoundError(path)

        stack: List[Tuple[str, VirtualNode]] = [(self.resolve_path(path), start)]

        while stack:
            node_path, node = stack.pop()
            yield node_path, node

            if isinstance(node, VirtualDirectory):
                for child in reversed(list(node.children.values())):
                    stack.append((PathResolver.join(node_path, child.name), child))

    # Deletion and restructuring

    def _contains(self, ancestor: VirtualNode, node: VirtualNode) -> bool:
        current: Optional[VirtualNode] = node
        while current is not None:
            if current is ancestor:
                return True
            current = current.parent
        return False

    def delete_node(self, path: str) -> None:
        """
        Unlink a node from its parent.

        Directories are unlinked with their whole subtree; callers that
        want ``rm``-style semantics check for directories themselves.

        Raises:
            RootOperationError: If the path is the root
            FileNotFoundError: If the parent or the node does not exist
        """
        resolved = self.resolve_path(path)

        if resolved == '/':
            raise RootOperationError(operation="delete")

        parent_path, name = PathResolver.split(resolved)
        parent = self.get_node(parent_path)

        if not isinstance(parent, VirtualDirectory):
            raise FileNotFoundError(parent_path)

        node = parent.get_child(name)
        if node is None:
            raise FileNotFoundError(path)

        detaches_cwd = self._contains(node, self._current)

        parent.remove_child(name)
        self._logger.debug("Deleted node", context={'path': resolved})
        self._emit(FileSystemEvent.NODE_DELETED, path=resolved, node=node)

        if detaches_cwd:
            self._logger.notice(
                "Current directory removed, moving to parent",
                context={'path': parent.path}
            )
            self._set_current(parent)

    def _placement(
        self,
        source: VirtualNode,
        dest: str
    ) -> Tuple[VirtualDirectory, str, str]:
        """Work out (parent, name, absolute path) for a copy/move target."""
        resolved = self.resolve_path(dest)
        target = self.get_node(resolved)

        if isinstance(target, VirtualDirectory):
            return target, source.name, PathResolver.join(resolved, source.name)

        parent_path, name = PathResolver.split(resolved)
        parent = self.get_node(parent_path)

        if parent is None:
            raise FileNotFoundError(parent_path)

        if not isinstance(parent, VirtualDirectory):
            raise NotADirectoryError(parent_path)

        return parent, name, resolved

    def copy_node(self, source_path: str, dest_path: str) -> VirtualNode:
        """
        Copy a file or a whole directory tree.

        When ``dest_path`` is an existing directory the copy is placed
        inside it under the source's name. An existing file at the target
        is overwritten by a file copy.

        Raises:
            FileNotFoundError: If the source or the target's parent is missing
            FileExistsError: If the target exists and is a directory, or the source is one
            InvalidPathError: If a directory would be copied into itself
        """
        source = self.get_node(source_path)
        if source is None:
            raise FileNotFoundError(source_path)

        source_resolved = self.resolve_path(source_path)
        parent, name, target_path = self._placement(source, dest_path)

        if source.is_directory and PathResolver.is_ancestor(source_resolved, target_path):
            raise InvalidPathError(dest_path, reason="cannot copy a directory into itself")

        existing = parent.children.get(name)
        if existing is not None and (existing.is_directory or source.is_directory):
            raise FileExistsError(target_path)

        copy = source.clone()
        copy.name = name
        parent.add_child(copy)

        self._logger.debug(
            "Copied node",
            context={'source': source_resolved, 'target': target_path}
        )
        self._emit(FileSystemEvent.NODE_CREATED, path=target_path, node=copy)
        return copy

    def move_node(self, source_path: str, dest_path: str) -> VirtualNode:
        """
        Move or rename a node.

        Uses the same target rules as ``copy_node``.

        Raises:
            RootOperationError: If the source is the root
            FileNotFoundError: If the source or the target's parent is missing
            FileExistsError: If the target exists and is a directory, or the source is one
            InvalidPathError: If a directory would be moved into itself
        """
        source_resolved = self.resolve_path(source_path)

        if source_resolved == '/':
            raise RootOperationError(operation="move")

        source = self.get_node(source_resolved)
        if source is None:
            raise FileNotFoundError(source_path)

        parent, name, target_path = self._placement(source, dest_path)

        if target_path == source_resolved:
            return source

        if source.is_directory and PathResolver.is_ancestor(source_resolved, target_path):
            raise InvalidPathError(dest_path, reason="cannot move a directory into itself")

        existing = parent.children.get(name)
        if existing is not None and (existing.is_directory or source.is_directory):
            raise FileExistsError(target_path)

        moves_cwd = self._contains(source, self._current)
        previous_cwd = self.get_current_path()

        source.parent.remove_child(source.name)
        source.name = name
        parent.add_child(source)

        self._logger.debug(
            "Moved node",
            context={'source': source_resolved, 'target': target_path}
        )
        self._emit(FileSystemEvent.NODE_DELETED, path=source_resolved, node=source)
        self._emit(FileSystemEvent.NODE_CREATED, path=target_path, node=source)

        if moves_cwd:
            self._emit(
                FileSystemEvent.DIRECTORY_CHANGED,
                path=self.get_current_path(),
                previous=previous_cwd
            )

        return source

    # Metadata

    def chmod(self, path: str, permissions: Union[FilePermissions, str, int]) -> VirtualNode:
        """
        Change the stored permission bits of a node.

        Accepts a FilePermissions, a 9-character rwx string, an octal
        string such as ``"755"`` or an integer mode. Permissions are only
        recorded for display.
        """
        node = self.get_node(path)
        if node is None:
            raise FileNotFoundError(path)

        if isinstance(permissions, str) and len(permissions) == 9:
            permissions = FilePermissions.from_string(permissions)
        elif not isinstance(permissions, FilePermissions):
            permissions = FilePermissions.from_octal(permissions)

        node.chmod(permissions)
        self._emit(FileSystemEvent.NODE_MODIFIED, path=self.resolve_path(path), node=node)
        return node

    def chown(self, path: str, owner: str, group: Optional[str] = None) -> VirtualNode:
        """Change the stored owner (and optionally group) of a node."""
        node = self.get_node(path)
        if node is None:
            raise FileNotFoundError(path)

        node.chown(owner, group)
        self._emit(FileSystemEvent.NODE_MODIFIED, path=self.resolve_path(path), node=node)
        return node

    def get_stats(self) -> dict[str, Any]:
        """Get filesystem statistics."""
        files = 0
        directories = 0
        max_depth = 0

        for node_path, node in self.walk('/'):
            if node.is_directory:
                directories += 1
            else:
                files += 1
            max_depth = max(max_depth, PathResolver.get_depth(node_path))

        return {
            'files': files,
            'directories': directories,
            'total_size': self._root.size(),
            'max_depth': max_depth,
            'cwd': self.get_current_path(),
        }
